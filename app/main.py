"""Revenue Intelligence Service - FastAPI Application."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.errors import InvalidPayloadError, VendorAPIError, VendorNotConfiguredError
from app.api import mrr_router, banking_router, proxy_router, debug_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        f"Starting Revenue Intelligence Service "
        f"({'proxy via ' + settings.proxy_base_url if settings.use_proxy else 'direct vendor access'})"
    )

    yield

    logger.info("Shutting down Revenue Intelligence Service")


# Create application
app = FastAPI(
    title="Revenue Intelligence Service",
    description="Combined MRR, ARR and burn reporting across Profitwell, Atlassian Marketplace and Mercury",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check (no auth required)
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "revenue-intel",
    }


# Root info
@app.get("/")
async def root():
    """API information."""
    return {
        "service": "Revenue Intelligence Service",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


# Include routers
app.include_router(mrr_router, prefix="/api/v1")
app.include_router(banking_router, prefix="/api/v1")
app.include_router(proxy_router, prefix="/api/v1")
app.include_router(debug_router, prefix="/api/v1")


# Error handlers
@app.exception_handler(VendorNotConfiguredError)
async def vendor_not_configured_handler(request: Request, exc: VendorNotConfiguredError):
    """A vendor was requested without credentials."""
    return JSONResponse(
        status_code=503,
        content={"detail": f"{exc.vendor} is not configured", "vendor": exc.vendor},
    )


@app.exception_handler(VendorAPIError)
async def vendor_error_handler(request: Request, exc: VendorAPIError):
    """A vendor API call failed."""
    logger.error(f"Vendor error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": exc.message, "vendor": exc.vendor, "vendor_status": exc.status_code},
    )


@app.exception_handler(InvalidPayloadError)
async def invalid_payload_handler(request: Request, exc: InvalidPayloadError):
    """Input or vendor data had the wrong shape."""
    logger.warning(f"Invalid payload on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": exc.errors},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
