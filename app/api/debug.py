"""Configuration diagnostics."""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.auth import verify_api_key
from app.config import Settings, get_settings

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("")
async def get_debug_info(
    settings: Settings = Depends(get_settings),
    _: str = Depends(verify_api_key),
):
    """Which vendors are configured and how they are reached. Never returns secrets."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "transport": "proxy" if settings.use_proxy else "direct",
        "vendors": {
            "profitwell": {"configured": settings.profitwell_configured},
            "atlassian": {
                "configured": settings.atlassian_configured,
                "vendor_id": settings.atlassian_vendor_id or None,
            },
            "mercury": {"configured": settings.mercury_configured},
            "macquarie": {"configured": settings.macquarie_balance is not None},
        },
    }
