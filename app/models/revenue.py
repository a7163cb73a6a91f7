"""Revenue models: raw marketplace transactions and monthly MRR breakdowns."""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SaleType(str, Enum):
    NEW = "New"
    RENEWAL = "Renewal"
    UPGRADE = "Upgrade"
    DOWNGRADE = "Downgrade"


class BillingPeriod(str, Enum):
    MONTHLY = "Monthly"
    ANNUAL = "Annual"


class PurchaseDetails(BaseModel):
    """Pricing block of a marketplace transaction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sale_date: date = Field(alias="saleDate")
    sale_type: SaleType = Field(alias="saleType")
    billing_period: BillingPeriod = Field(alias="billingPeriod")
    purchase_price: float = Field(alias="purchasePrice")
    old_purchase_price: Optional[float] = Field(default=None, alias="oldPurchasePrice")


class RawTransaction(BaseModel):
    """One billing event from the Atlassian transactions export."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    customer_id: str = Field(alias="cloudId")
    purchase_details: PurchaseDetails = Field(alias="purchaseDetails")


class ChurnEvent(BaseModel):
    """One entry from the Atlassian churn details export."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    customer_id: str = Field(alias="cloudId")
    churn_date: str = Field(alias="churnDate")
    churn_reason: Optional[str] = Field(default=None, alias="churnReason")
    last_purchase_price: float = Field(default=0.0, alias="lastPurchasePrice")


# month key -> customer id -> recognized revenue
MonthlyRevenueTable = dict[str, dict[str, float]]


class MRRTotals(BaseModel):
    """The movement categories of one month plus its totals.

    Churn fields are signed negative.
    """

    new_revenue: float = 0.0
    reactivations: float = 0.0
    upgrades: float = 0.0
    downgrades: float = 0.0
    voluntary_churn: float = 0.0
    delinquent_churn: float = 0.0
    existing: float = 0.0
    total_mrr: float = 0.0
    arr: float = 0.0


class MonthlyBreakdown(MRRTotals):
    """MRR movement for one calendar month, shared by every source."""

    date: str = Field(pattern=r"^\d{4}-\d{2}$")

    @classmethod
    def empty(cls, month: str) -> "MonthlyBreakdown":
        """Zero-filled record standing in for a month a source did not report."""
        return cls(date=month)


class AtlassianMonthlyData(MonthlyBreakdown):
    """Breakdown plus the per-customer amounts behind each category."""

    new_customers: dict[str, float] = Field(default_factory=dict)
    reactivated_customers: dict[str, float] = Field(default_factory=dict)
    upgraded_customers: dict[str, float] = Field(default_factory=dict)
    downgraded_customers: dict[str, float] = Field(default_factory=dict)
    churned_customers: dict[str, float] = Field(default_factory=dict)
    retained_customers: dict[str, float] = Field(default_factory=dict)
