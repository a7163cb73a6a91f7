"""Month-over-month revenue movement for marketplace customers."""
from pydantic import BaseModel, Field


class MonthlyMovement(BaseModel):
    """Revenue movement between two adjacent months."""
    new_revenue: float = 0.0
    expansion_revenue: float = 0.0
    retained_revenue: float = 0.0
    churned_revenue: float = 0.0

    new_customers: dict[str, float] = Field(default_factory=dict)
    expanded_customers: dict[str, float] = Field(default_factory=dict)
    retained_customers: dict[str, float] = Field(default_factory=dict)
    churned_customers: dict[str, float] = Field(default_factory=dict)


def calculate_movement(
    current_month: dict[str, float],
    previous_month: dict[str, float],
) -> MonthlyMovement:
    """Classify each customer's revenue change between two months.

    A customer only seen this month is new. A customer seen in both months
    retains min(current, previous) and any excess is expansion. Contraction
    has no bucket of its own; it only shrinks the retained amount. A customer
    only seen last month is churned for their full previous amount.
    """
    movement = MonthlyMovement()

    for customer, amount in current_month.items():
        if customer not in previous_month:
            movement.new_revenue += amount
            movement.new_customers[customer] = amount
            continue

        previous = previous_month[customer]
        if amount > previous:
            movement.expansion_revenue += amount - previous
            movement.expanded_customers[customer] = amount - previous
        retained = min(amount, previous)
        movement.retained_revenue += retained
        movement.retained_customers[customer] = retained

    for customer, amount in previous_month.items():
        if customer not in current_month:
            movement.churned_revenue += amount
            movement.churned_customers[customer] = amount

    return movement
