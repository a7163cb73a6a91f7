"""Turn Atlassian marketplace transactions into per-customer monthly revenue."""
import logging
from typing import Any, Iterable

from pydantic import ValidationError

from app.errors import InvalidPayloadError
from app.metrics.months import add_months, month_key
from app.models import BillingPeriod, MonthlyRevenueTable, RawTransaction, SaleType

logger = logging.getLogger(__name__)

ANNUAL_MONTHS = 12


def parse_transactions(payload: Any) -> list[RawTransaction]:
    """Validate a transactions export, skipping malformed records.

    Accepts the bare list the export endpoint returns or a
    `{"transactions": [...]}` wrapper. A record with a bad sale date or a
    missing field is logged and dropped; the rest of the batch is kept.
    """
    if payload is None:
        return []
    if isinstance(payload, dict) and "transactions" in payload:
        payload = payload["transactions"]
    if not isinstance(payload, list):
        raise InvalidPayloadError(
            f"Expected a list of transactions, got {type(payload).__name__}"
        )

    transactions = []
    for index, item in enumerate(payload):
        try:
            transactions.append(RawTransaction.model_validate(item))
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            logger.warning(f"Skipping malformed transaction #{index} ({fields})")

    if len(transactions) < len(payload):
        logger.warning(f"Skipped {len(payload) - len(transactions)} of {len(payload)} transactions")
    return transactions


def _monthly_amount(transaction: RawTransaction) -> float:
    """Revenue a monthly-billed transaction adds to its sale month."""
    details = transaction.purchase_details
    if details.sale_type == SaleType.UPGRADE:
        return details.purchase_price - (details.old_purchase_price or 0.0)
    return details.purchase_price


def build_monthly_revenue(transactions: Iterable[RawTransaction]) -> MonthlyRevenueTable:
    """Accumulate recognized revenue per month per customer.

    Annual charges are spread evenly over twelve months starting at the sale
    month. Monthly charges land in the sale month only.
    """
    monthly_revenue: MonthlyRevenueTable = {}

    def add(month: str, customer: str, amount: float) -> None:
        customers = monthly_revenue.setdefault(month, {})
        customers[customer] = customers.get(customer, 0.0) + amount

    for transaction in transactions:
        details = transaction.purchase_details
        customer = transaction.customer_id

        if details.billing_period == BillingPeriod.ANNUAL:
            monthly_amount = details.purchase_price / ANNUAL_MONTHS
            for i in range(ANNUAL_MONTHS):
                add(month_key(add_months(details.sale_date, i)), customer, monthly_amount)
        else:
            add(month_key(details.sale_date), customer, _monthly_amount(transaction))

    return monthly_revenue
