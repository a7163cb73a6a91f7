"""Mercury banking collector."""
import logging
from datetime import date, datetime, timezone
from typing import Any

import httpx

from app.collectors.base import BaseCollector
from app.collectors.transport import DirectTransport
from app.config import Settings
from app.errors import InvalidPayloadError, VendorAPIError, VendorNotConfiguredError
from app.metrics import calculate_burn
from app.metrics.months import month_bounds, month_key, trailing_months
from app.models import BankBalance, BurnRateMetrics, MercuryAccount, MercuryTransaction

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "secret-token:"


class MercuryCollector(BaseCollector):
    """Collect balances and spend from the Mercury API."""

    name = "mercury"
    BASE_URL = "https://api.mercury.com/api/v1"
    transactions_page_size = 1000

    @classmethod
    def direct_transport(
        cls,
        settings: Settings,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> DirectTransport:
        if not settings.mercury_configured:
            raise VendorNotConfiguredError(cls.name)

        token = settings.mercury_api_key
        if not token.startswith(TOKEN_PREFIX):
            token = f"{TOKEN_PREFIX}{token}"

        return DirectTransport(
            cls.name,
            cls.BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=settings.request_timeout,
            transport=http_transport,
        )

    def _items(self, data: Any, key: str) -> Any:
        """The list under `key` of a Mercury response object."""
        if not data:
            return []
        if not isinstance(data, dict):
            raise InvalidPayloadError(f"mercury: expected an object, got {type(data).__name__}")
        return data.get(key, [])

    async def get_accounts(self) -> list[MercuryAccount]:
        data = await self.fetch_json("/accounts")
        return self.parse_list(MercuryAccount, self._items(data, "accounts"))

    async def get_transactions(
        self,
        account_id: str,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[MercuryTransaction]:
        """Transactions for an account, most recent first."""
        params: dict[str, Any] = {"order": "desc"}
        if start:
            params["start"] = start.isoformat()
        if end:
            params["end"] = end.isoformat()
        if limit:
            params["limit"] = limit
        if offset:
            params["offset"] = offset

        data = await self.fetch_json(f"/account/{account_id}/transactions", **params)
        return self.parse_list(MercuryTransaction, self._items(data, "transactions"))

    async def get_account_statement(self, account_id: str, statement_date: str) -> dict[str, Any]:
        return await self.fetch_json(f"/accounts/{account_id}/statements/{statement_date}")

    async def get_bank_balances(self) -> list[BankBalance]:
        """Available balance of every account."""
        now = datetime.now(timezone.utc).isoformat()
        return [
            BankBalance(
                source="mercury",
                account_name=account.name,
                balance=account.available_balance,
                currency=account.currency,
                last_updated=now,
            )
            for account in await self.get_accounts()
        ]

    async def get_burn_rate_metrics(self, months: int = 3, today: date | None = None) -> list[BurnRateMetrics]:
        """Burn for each of the `months` months ending at `today`, oldest first.

        An account whose transactions cannot be fetched is left out of that
        month rather than failing the whole report.
        """
        accounts = await self.get_accounts()
        metrics = []

        for month_start in trailing_months(months, today):
            start, end = month_bounds(month_start)
            transactions: list[MercuryTransaction] = []

            for account in accounts:
                try:
                    transactions.extend(await self.get_transactions(
                        account.id, start, end, limit=self.transactions_page_size,
                    ))
                except VendorAPIError as e:
                    logger.error(f"Skipping account {account.id} for {month_key(month_start)}: {e.message}")

            metrics.append(calculate_burn(month_key(month_start), transactions))

        return metrics
