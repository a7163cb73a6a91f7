"""Burn rate calculations over Mercury transactions."""
from typing import Iterable

from app.models import BurnRateMetrics, MercuryTransaction

# (keywords, category, expense type), first match wins
CATEGORY_RULES = [
    (
        ("stripe", "github", "vercel", "openai", "anthropic", "aws", "google cloud", "microsoft"),
        "Software & Tools",
        "software",
    ),
    (("payroll", "salary", "gusto", "adp"), "Payroll", "payroll"),
    (("legal", "accounting", "consulting", "service"), "Professional Services", "services"),
    (("tax", "irs"), "Taxes", "tax"),
]


def categorize_transaction(transaction: MercuryTransaction) -> tuple[str, str, str]:
    """Return (vendor, category, expense type) for a transaction."""
    description = transaction.description.lower()
    vendor = transaction.counterparty_name or "Unknown"

    for keywords, category, expense_type in CATEGORY_RULES:
        if any(keyword in description for keyword in keywords):
            return vendor, category, expense_type

    return vendor, "Other", "other"


def calculate_burn(period: str, transactions: Iterable[MercuryTransaction]) -> BurnRateMetrics:
    """Sum outgoing payments for one month, broken down by vendor and category."""
    total_burn = 0.0
    transaction_count = 0
    vendor_breakdown: dict[str, float] = {}
    category_breakdown: dict[str, float] = {}

    for transaction in transactions:
        # Only debits count as burn
        if transaction.kind != "debit" or transaction.amount <= 0:
            continue

        vendor, category, _ = categorize_transaction(transaction)
        total_burn += transaction.amount
        transaction_count += 1
        vendor_breakdown[vendor] = vendor_breakdown.get(vendor, 0.0) + transaction.amount
        category_breakdown[category] = category_breakdown.get(category, 0.0) + transaction.amount

    return BurnRateMetrics(
        period=period,
        total_burn=total_burn,
        vendor_breakdown=vendor_breakdown,
        category_breakdown=category_breakdown,
        transaction_count=transaction_count,
        average_transaction_size=total_burn / transaction_count if transaction_count > 0 else 0.0,
    )
