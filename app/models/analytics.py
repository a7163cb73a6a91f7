"""Combined cross-source MRR models."""
from typing import Optional

from pydantic import BaseModel

from app.models.revenue import MonthlyBreakdown, MRRTotals


class MRRAdjustment(BaseModel):
    """Display-only override of the latest month's total.

    Attached when the Atlassian figure for the current month looks
    incompletely reported.
    """
    profitwell: float
    atlassian: float
    total: float
    note: str


class CombinedMonthlyBreakdown(BaseModel):
    """Both sources for one month and their field-wise sum."""
    date: str
    profitwell: MonthlyBreakdown
    atlassian: MonthlyBreakdown
    combined: MRRTotals
    adjusted_mrr: Optional[MRRAdjustment] = None


class SummaryMetrics(BaseModel):
    """Headline numbers for the latest combined month."""
    current_mrr: float
    current_arr: float
    monthly_growth: float
    new_revenue: float
    churn_revenue: float
    net_growth: float
    profitwell_mrr: float
    atlassian_mrr: float
    profitwell_percentage: float
    atlassian_percentage: float
    adjustment_note: Optional[str] = None
    raw_mrr: float
    is_adjusted: bool
