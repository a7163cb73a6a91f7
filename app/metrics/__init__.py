"""Pure MRR and burn calculations."""
from app.metrics.normalizer import parse_transactions, build_monthly_revenue
from app.metrics.classifier import MonthlyMovement, calculate_movement
from app.metrics.breakdown import assemble_breakdowns, assemble_monthly_data
from app.metrics.combined import parse_breakdowns, combine_mrr_data, calculate_summary_metrics
from app.metrics.burn import categorize_transaction, calculate_burn

__all__ = [
    "parse_transactions",
    "build_monthly_revenue",
    "MonthlyMovement",
    "calculate_movement",
    "assemble_breakdowns",
    "assemble_monthly_data",
    "parse_breakdowns",
    "combine_mrr_data",
    "calculate_summary_metrics",
    "categorize_transaction",
    "calculate_burn",
]
