"""Assemble monthly MRR breakdowns from a per-customer revenue table."""
from datetime import date

from app.metrics.classifier import MonthlyMovement, calculate_movement
from app.metrics.months import add_months, month_key, trailing_months
from app.models import AtlassianMonthlyData, MonthlyBreakdown, MonthlyRevenueTable


def _movements(
    monthly_revenue: MonthlyRevenueTable,
    months: int,
    today: date | None,
) -> list[tuple[str, MonthlyMovement]]:
    """Movement for each month of the window against the month before it."""
    results = []
    for month_start in trailing_months(months, today):
        current_key = month_key(month_start)
        previous_key = month_key(add_months(month_start, -1))
        movement = calculate_movement(
            monthly_revenue.get(current_key, {}),
            monthly_revenue.get(previous_key, {}),
        )
        results.append((current_key, movement))
    return results


def _breakdown_fields(month: str, movement: MonthlyMovement) -> dict:
    # Churn is already netted out of retained revenue, so it is not part of total_mrr.
    total_mrr = movement.new_revenue + movement.expansion_revenue + movement.retained_revenue
    return {
        "date": month,
        "new_revenue": movement.new_revenue,
        "reactivations": 0.0,
        "upgrades": movement.expansion_revenue,
        "downgrades": 0.0,
        "voluntary_churn": -movement.churned_revenue,
        "delinquent_churn": 0.0,
        "existing": movement.retained_revenue,
        "total_mrr": total_mrr,
        "arr": total_mrr * 12,
    }


def assemble_breakdowns(
    monthly_revenue: MonthlyRevenueTable,
    months: int = 6,
    today: date | None = None,
) -> list[MonthlyBreakdown]:
    """One breakdown per month for the `months` months ending at `today`, oldest first.

    Marketplace data cannot tell reactivations or downgrades apart and has
    no delinquent churn, so those fields are always zero.
    """
    return [
        MonthlyBreakdown(**_breakdown_fields(month, movement))
        for month, movement in _movements(monthly_revenue, months, today)
    ]


def assemble_monthly_data(
    monthly_revenue: MonthlyRevenueTable,
    months: int = 6,
    today: date | None = None,
) -> list[AtlassianMonthlyData]:
    """Like `assemble_breakdowns`, with the per-customer amounts attached."""
    return [
        AtlassianMonthlyData(
            **_breakdown_fields(month, movement),
            new_customers=movement.new_customers,
            upgraded_customers=movement.expanded_customers,
            churned_customers=movement.churned_customers,
            retained_customers=movement.retained_customers,
        )
        for month, movement in _movements(monthly_revenue, months, today)
    ]
