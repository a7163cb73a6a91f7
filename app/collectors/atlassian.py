"""Atlassian Marketplace vendor reporting collector."""
import logging
from datetime import date
from typing import Any

import httpx

from app.collectors.base import BaseCollector
from app.collectors.transport import DirectTransport, Transport
from app.config import Settings
from app.errors import VendorNotConfiguredError
from app.metrics import assemble_breakdowns, assemble_monthly_data, build_monthly_revenue, parse_transactions
from app.models import AtlassianMonthlyData, ChurnEvent, MonthlyBreakdown, RawTransaction

logger = logging.getLogger(__name__)


class AtlassianCollector(BaseCollector):
    """Collect marketplace sales and derive MRR movement from them.

    The transactions export is a raw ledger, so unlike Profitwell the
    monthly breakdown is computed here.
    """

    name = "atlassian"
    BASE_URL = "https://marketplace.atlassian.com/rest/2/vendors"

    def __init__(self, transport: Transport, vendor_id: str):
        super().__init__(transport)
        self.vendor_id = vendor_id

    @classmethod
    def direct_transport(
        cls,
        settings: Settings,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> DirectTransport:
        if not settings.atlassian_configured:
            raise VendorNotConfiguredError(cls.name)
        return DirectTransport(
            cls.name,
            cls.BASE_URL,
            auth=httpx.BasicAuth(settings.atlassian_email, settings.atlassian_api_token),
            timeout=settings.request_timeout,
            transport=http_transport,
        )

    @classmethod
    def options(cls, settings: Settings) -> dict[str, Any]:
        # Export endpoints are scoped by vendor, in proxy mode too
        if not settings.atlassian_vendor_id:
            raise VendorNotConfiguredError(cls.name)
        return {"vendor_id": settings.atlassian_vendor_id}

    async def get_transactions(self) -> list[RawTransaction]:
        """All sales transactions; malformed records are skipped."""
        payload = await self.fetch_json(f"{self.vendor_id}/reporting/sales/transactions/export")
        transactions = parse_transactions(payload)
        logger.info(f"Atlassian returned {len(transactions)} transactions")
        return transactions

    async def get_churn_events(self) -> list[ChurnEvent]:
        """Churn details export."""
        payload = await self.fetch_json(f"{self.vendor_id}/reporting/sales/metrics/churn/details/export")
        if isinstance(payload, dict):
            payload = payload.get("churnEvents", [])
        return self.parse_list(ChurnEvent, payload)

    async def get_mrr_breakdown(self, months: int = 6, today: date | None = None) -> list[MonthlyBreakdown]:
        """MRR breakdown for the `months` months ending at `today`."""
        monthly_revenue = build_monthly_revenue(await self.get_transactions())
        return assemble_breakdowns(monthly_revenue, months, today)

    async def get_monthly_data(self, months: int = 6, today: date | None = None) -> list[AtlassianMonthlyData]:
        """Breakdowns with the per-customer amounts behind them."""
        monthly_revenue = build_monthly_revenue(await self.get_transactions())
        return assemble_monthly_data(monthly_revenue, months, today)
