"""Pydantic models."""
from app.models.revenue import (
    SaleType,
    BillingPeriod,
    PurchaseDetails,
    RawTransaction,
    ChurnEvent,
    MonthlyRevenueTable,
    MRRTotals,
    MonthlyBreakdown,
    AtlassianMonthlyData,
)
from app.models.analytics import MRRAdjustment, CombinedMonthlyBreakdown, SummaryMetrics
from app.models.banking import MercuryAccount, MercuryTransaction, BurnRateMetrics, BankBalance
from app.models.system import SourceStatus

__all__ = [
    "SaleType",
    "BillingPeriod",
    "PurchaseDetails",
    "RawTransaction",
    "ChurnEvent",
    "MonthlyRevenueTable",
    "MRRTotals",
    "MonthlyBreakdown",
    "AtlassianMonthlyData",
    "MRRAdjustment",
    "CombinedMonthlyBreakdown",
    "SummaryMetrics",
    "MercuryAccount",
    "MercuryTransaction",
    "BurnRateMetrics",
    "BankBalance",
    "SourceStatus",
]
