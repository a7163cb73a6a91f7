"""Merge Profitwell and Atlassian breakdowns into one MRR series."""
import logging
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from app.errors import InvalidPayloadError
from app.models import (
    CombinedMonthlyBreakdown,
    MonthlyBreakdown,
    MRRAdjustment,
    MRRTotals,
    SummaryMetrics,
)

logger = logging.getLogger(__name__)

SUMMED_FIELDS = (
    "new_revenue",
    "reactivations",
    "upgrades",
    "downgrades",
    "voluntary_churn",
    "delinquent_churn",
    "existing",
    "total_mrr",
)

_breakdown_list = TypeAdapter(list[MonthlyBreakdown])


def parse_breakdowns(payload: Any) -> list[MonthlyBreakdown]:
    """Validate an already-deserialized breakdown series."""
    if payload is None:
        return []
    try:
        return _breakdown_list.validate_python(payload)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise InvalidPayloadError("Invalid MRR breakdown series", errors=errors) from e


def _sum_totals(first: MRRTotals, second: MRRTotals) -> MRRTotals:
    values = {field: getattr(first, field) + getattr(second, field) for field in SUMMED_FIELDS}
    values["arr"] = values["total_mrr"] * 12
    return MRRTotals(**values)


def _adjustment(
    profitwell: MonthlyBreakdown,
    atlassian: MonthlyBreakdown,
    previous_atlassian: MonthlyBreakdown,
) -> Optional[MRRAdjustment]:
    """Use last month's Atlassian total when the current one dropped.

    Atlassian reports the running month incrementally, so a lower figure than
    the month before usually means it is not complete yet.
    """
    if previous_atlassian.total_mrr <= atlassian.total_mrr:
        return None

    return MRRAdjustment(
        profitwell=profitwell.total_mrr,
        atlassian=previous_atlassian.total_mrr,
        total=profitwell.total_mrr + previous_atlassian.total_mrr,
        note=(
            f"Using {previous_atlassian.date} Atlassian MRR (${previous_atlassian.total_mrr:.2f}) "
            f"instead of current month (${atlassian.total_mrr:.2f}) due to incremental reporting"
        ),
    )


def combine_mrr_data(
    profitwell_data: Sequence[MonthlyBreakdown],
    atlassian_data: Sequence[MonthlyBreakdown],
) -> list[CombinedMonthlyBreakdown]:
    """Align both sources by month and sum them.

    Every month present in either source is returned, oldest first; a month
    missing from one source is zero-filled for it. The latest month may carry
    an `adjusted_mrr` override, `combined` itself is never altered.
    """
    profitwell_by_month = {item.date: item for item in profitwell_data}
    atlassian_by_month = {item.date: item for item in atlassian_data}
    sorted_atlassian = sorted(atlassian_data, key=lambda item: item.date)

    combined = []
    for month in sorted(profitwell_by_month.keys() | atlassian_by_month.keys()):
        profitwell = profitwell_by_month.get(month) or MonthlyBreakdown.empty(month)
        atlassian = atlassian_by_month.get(month) or MonthlyBreakdown.empty(month)
        combined.append(CombinedMonthlyBreakdown(
            date=month,
            profitwell=profitwell,
            atlassian=atlassian,
            combined=_sum_totals(profitwell, atlassian),
        ))

    if combined and len(sorted_atlassian) > 1:
        latest = combined[-1]
        latest.adjusted_mrr = _adjustment(latest.profitwell, latest.atlassian, sorted_atlassian[-2])
        if latest.adjusted_mrr:
            logger.info(f"Adjusted {latest.date} MRR: {latest.adjusted_mrr.note}")

    return combined


def _effective_mrr(item: CombinedMonthlyBreakdown) -> float:
    return item.adjusted_mrr.total if item.adjusted_mrr else item.combined.total_mrr


def _percentage(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def calculate_summary_metrics(
    combined_data: Sequence[CombinedMonthlyBreakdown],
) -> Optional[SummaryMetrics]:
    """Headline metrics for the latest month, or None for an empty series."""
    if not combined_data:
        return None

    latest = combined_data[-1]
    previous = combined_data[-2] if len(combined_data) > 1 else None

    current_mrr = _effective_mrr(latest)
    previous_mrr = _effective_mrr(previous) if previous else 0.0
    growth = ((current_mrr - previous_mrr) / previous_mrr) * 100 if previous_mrr > 0 else 0.0

    atlassian_mrr = latest.adjusted_mrr.atlassian if latest.adjusted_mrr else latest.atlassian.total_mrr
    churn = latest.combined.voluntary_churn + latest.combined.delinquent_churn

    return SummaryMetrics(
        current_mrr=current_mrr,
        current_arr=current_mrr * 12,
        monthly_growth=growth,
        new_revenue=latest.combined.new_revenue,
        churn_revenue=abs(churn),
        net_growth=latest.combined.new_revenue + churn,
        profitwell_mrr=latest.profitwell.total_mrr,
        atlassian_mrr=atlassian_mrr,
        profitwell_percentage=_percentage(latest.profitwell.total_mrr, current_mrr),
        atlassian_percentage=_percentage(atlassian_mrr, current_mrr),
        adjustment_note=latest.adjusted_mrr.note if latest.adjusted_mrr else None,
        raw_mrr=latest.combined.total_mrr,
        is_adjusted=latest.adjusted_mrr is not None,
    )
