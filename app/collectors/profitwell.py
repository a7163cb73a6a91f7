"""Profitwell subscription analytics collector."""
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from app.collectors.base import BaseCollector
from app.collectors.transport import DirectTransport
from app.config import Settings
from app.errors import InvalidPayloadError, VendorNotConfiguredError
from app.models import MonthlyBreakdown

logger = logging.getLogger(__name__)

USER_AGENT = "revenue-intel/0.1.0"

# MonthlyBreakdown field -> Profitwell monthly metric series
METRIC_SERIES = {
    "new_revenue": "new_recurring_revenue",
    "reactivations": "reactivated_recurring_revenue",
    "upgrades": "upgraded_recurring_revenue",
    "downgrades": "downgraded_recurring_revenue",
    "voluntary_churn": "churned_recurring_revenue_cancellations",
    "delinquent_churn": "churned_recurring_revenue_delinquent",
    "existing": "existing_recurring_revenue",
    "total_mrr": "recurring_revenue",
}


def _series_value(series: list[dict], index: int) -> float:
    if not isinstance(series, list) or index >= len(series) or not isinstance(series[index], dict):
        return 0.0
    return float(series[index].get("value") or 0)


def transform_monthly_metrics(payload: dict[str, Any], months: int = 6) -> list[MonthlyBreakdown]:
    """Build breakdowns for the last `months` entries of the monthly metrics.

    Profitwell returns one list per metric, aligned by index; dates are taken
    from `recurring_revenue`. Missing values count as zero. A month with a
    non-numeric value or a malformed date is skipped and logged.
    """
    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise InvalidPayloadError(f"profitwell: expected data to be an object, got {type(data).__name__}")

    recurring = data.get("recurring_revenue") or []
    if not isinstance(recurring, list):
        raise InvalidPayloadError(f"profitwell: expected recurring_revenue to be a list, got {type(recurring).__name__}")
    breakdowns = []

    for index in range(max(0, len(recurring) - months), len(recurring)):
        point = recurring[index]
        month = point.get("date") if isinstance(point, dict) else None
        if not month:
            continue

        try:
            values = {
                field: _series_value(data.get(series) or [], index)
                for field, series in METRIC_SERIES.items()
            }
            breakdowns.append(MonthlyBreakdown(
                date=str(month)[:7],
                arr=values["total_mrr"] * 12,
                **values,
            ))
        except (TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping malformed Profitwell month #{index} ({month}): {e}")

    return breakdowns


class ProfitwellCollector(BaseCollector):
    """Collect MRR movement from the Profitwell v2 API."""

    name = "profitwell"
    BASE_URL = "https://api.profitwell.com/v2"

    @classmethod
    def direct_transport(
        cls,
        settings: Settings,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> DirectTransport:
        if not settings.profitwell_configured:
            raise VendorNotConfiguredError(cls.name)
        return DirectTransport(
            cls.name,
            cls.BASE_URL,
            headers={"Authorization": settings.profitwell_api_key, "User-Agent": USER_AGENT},
            timeout=settings.request_timeout,
            transport=http_transport,
        )

    async def get_monthly_metrics(self) -> dict[str, Any]:
        """Raw monthly metrics (every metric series Profitwell tracks)."""
        data = await self.fetch_json("/metrics/monthly/")
        if not isinstance(data, dict):
            raise InvalidPayloadError(f"profitwell: expected an object, got {type(data).__name__}")
        return data

    async def get_mrr_breakdown(self, months: int = 6) -> list[MonthlyBreakdown]:
        """MRR breakdown for the last `months` months."""
        metrics = await self.get_monthly_metrics()
        breakdowns = transform_monthly_metrics(metrics, months)
        logger.info(f"Profitwell returned {len(breakdowns)} monthly breakdowns")
        return breakdowns
