"""Authenticated pass-through to vendor APIs."""
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.auth import verify_api_key
from app.api.deps import get_http_transport
from app.collectors import COLLECTORS
from app.config import Settings, get_settings
from app.errors import VendorAPIError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proxy", tags=["proxy"])


@router.get("/{vendor}")
async def proxy_vendor_request(
    vendor: str,
    endpoint: str = Query("", description="Vendor API path, relative to its base URL"),
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
) -> Any:
    """Forward a GET to a vendor using this server's credentials."""
    collector_cls = COLLECTORS.get(vendor)
    if not collector_cls:
        raise HTTPException(status_code=404, detail=f"Unknown vendor: {vendor}")
    if not endpoint:
        raise HTTPException(status_code=400, detail="Missing endpoint parameter")
    # Credentials must only ever go to the vendor's own host
    if "://" in endpoint or endpoint.startswith("//"):
        raise HTTPException(status_code=400, detail="Endpoint must be a relative path")

    # Always direct: proxying a proxy would loop
    transport = collector_cls.direct_transport(settings, http_transport)
    try:
        return await transport.get_json(endpoint)
    except VendorAPIError as e:
        logger.error(f"Proxied {vendor} request failed: {e}")
        raise HTTPException(status_code=e.status_code or 502, detail=e.message)
    finally:
        await transport.aclose()
