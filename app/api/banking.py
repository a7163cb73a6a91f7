"""Banking API endpoints."""
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.auth import verify_api_key
from app.api.deps import get_http_transport
from app.collectors import MercuryCollector
from app.config import Settings, get_settings
from app.errors import DashboardError
from app.models import BankBalance, BurnRateMetrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/banking", tags=["banking"])

MACQUARIE_ACCOUNT_NAME = "Macquarie Australia"


class BankBalancesResponse(BaseModel):
    """Balances across banks; `error` is set when Mercury could not be read."""
    balances: list[BankBalance]
    error: Optional[str] = None


def _macquarie_balance(settings: Settings) -> Optional[BankBalance]:
    if settings.macquarie_balance is None:
        return None
    return BankBalance(
        source="macquarie",
        account_name=MACQUARIE_ACCOUNT_NAME,
        balance=settings.macquarie_balance,
        currency="AUD",
        last_updated=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/balances", response_model=BankBalancesResponse)
async def get_bank_balances(
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Mercury account balances plus the manually entered Macquarie balance.

    When Mercury fails and a Macquarie balance is configured, that balance is
    returned on its own together with the Mercury error.
    """
    macquarie = _macquarie_balance(settings)
    try:
        async with MercuryCollector.from_settings(settings, http_transport) as collector:
            balances = await collector.get_bank_balances()
    except DashboardError as e:
        if macquarie is None:
            raise
        logger.warning(f"Mercury unavailable, returning Macquarie balance only: {e}")
        return BankBalancesResponse(balances=[macquarie], error=f"Mercury API unavailable: {e}")

    if macquarie is not None:
        balances.append(macquarie)
    return BankBalancesResponse(balances=balances)


@router.get("/burn-rate", response_model=list[BurnRateMetrics])
async def get_burn_rate(
    months: Optional[int] = Query(None, ge=1, le=36),
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Monthly burn across all Mercury accounts."""
    async with MercuryCollector.from_settings(settings, http_transport) as collector:
        return await collector.get_burn_rate_metrics(months or settings.burn_rate_months)
