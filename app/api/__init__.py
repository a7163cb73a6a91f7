"""API routes."""
from app.api.mrr import router as mrr_router
from app.api.banking import router as banking_router
from app.api.proxy import router as proxy_router
from app.api.debug import router as debug_router

__all__ = [
    "mrr_router",
    "banking_router",
    "proxy_router",
    "debug_router",
]
