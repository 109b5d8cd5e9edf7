"""
Monthly expense-structure breakdown.

Splits one calendar month's vehicle spending into charging, variable and
fixed costs, with each part's share of the total.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, Iterable, Optional

from ev_charge_ledger.storage.models import (
    ChargingRecord,
    FixedExpenses,
    VariableExpense
)
from .months import month_key, month_key_of
from .pricing import safe_divide

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class ExpenseBreakdown:
    """Cost structure for a single calendar month."""
    month: str  # "YYYY-MM"
    charging_cost: float
    variable_cost: float
    fixed_cost: float
    total: float
    charging_percent: float
    variable_percent: float
    fixed_percent: float
    variable_by_category: Dict[str, float] = field(default_factory=dict)


def amortized_fixed_cost(fixed: Optional[FixedExpenses]) -> float:
    """Monthly share of recurring costs.

    Annual items are spread linearly over twelve months with no
    proration for partial months.

    Args:
        fixed: The owner's fixed expenses, or None if never configured

    Returns:
        loan + parking + insurance / 12 + license / 12, or 0.0
    """
    if fixed is None:
        return 0.0
    return (
        fixed.monthly_loan
        + fixed.monthly_parking
        + fixed.insurance_annual_cost / MONTHS_PER_YEAR
        + fixed.license_annual_cost / MONTHS_PER_YEAR
    )


def compute_expense_breakdown(
    records: Iterable[ChargingRecord],
    expenses: Iterable[VariableExpense],
    fixed: Optional[FixedExpenses],
    reference: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> ExpenseBreakdown:
    """Compute the three-way cost split for the reference month.

    Only records and expenses whose timestamp falls in the reference
    month (in the owner's calendar) are counted; callers may pass the
    full history.

    Args:
        records: The owner's charging records
        expenses: The owner's variable expenses
        fixed: The owner's fixed expenses, if any
        reference: Any instant inside the month to report on; defaults
            to now
        tz: Calendar timezone; None uses the host's local timezone

    Returns:
        ExpenseBreakdown whose percentages are all 0 when total is 0
    """
    if reference is None:
        reference = datetime.now(tz)
    elif reference.tzinfo is not None:
        # astimezone(None) lands in host-local time, matching month_key
        reference = reference.astimezone(tz)
    month = month_key_of(reference)

    charging_cost = sum(
        (r.total_amount for r in records if month_key(r.timestamp, tz) == month),
        0.0
    )

    variable_by_category: Dict[str, float] = {}
    for expense in expenses:
        if month_key(expense.timestamp, tz) != month:
            continue
        category = expense.category.value
        variable_by_category[category] = variable_by_category.get(category, 0.0) + expense.amount
    variable_cost = sum(variable_by_category.values(), 0.0)

    fixed_cost = amortized_fixed_cost(fixed)
    total = charging_cost + variable_cost + fixed_cost

    return ExpenseBreakdown(
        month=month,
        charging_cost=charging_cost,
        variable_cost=variable_cost,
        fixed_cost=fixed_cost,
        total=total,
        charging_percent=_percent_of(charging_cost, total),
        variable_percent=_percent_of(variable_cost, total),
        fixed_percent=_percent_of(fixed_cost, total),
        variable_by_category=variable_by_category
    )


def _percent_of(part: float, total: float) -> float:
    return safe_divide(100.0 * part, total)
