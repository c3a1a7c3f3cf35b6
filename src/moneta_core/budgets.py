"""Budget usage and spending-goal progress."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from .config import GoalConfig
from .dates import month_bounds
from .models import (
    TOTAL_BUDGET_CATEGORY,
    Budget,
    BudgetPeriod,
    BudgetStatus,
    GoalProgress,
    GoalStatus,
    GoalType,
    MonetaryRecord,
    SpendingGoal,
)

logger = structlog.get_logger()

HUNDRED = Decimal("100")


def budget_window(period: BudgetPeriod, as_of: date) -> tuple[date, date]:
    """First and last day of the budget period containing ``as_of``.

    Weeks run Sunday to Saturday.
    """
    if period == BudgetPeriod.DAILY:
        return as_of, as_of
    if period == BudgetPeriod.WEEKLY:
        # date.weekday() is 0 for Monday; shift so Sunday is day 0
        start = as_of - timedelta(days=(as_of.weekday() + 1) % 7)
        return start, start + timedelta(days=6)
    return month_bounds(as_of.year, as_of.month)


def _spent(
    expenses: Iterable[MonetaryRecord],
    start: date,
    end: date,
    category: Optional[str] = None,
) -> Decimal:
    return sum(
        (
            e.amount
            for e in expenses
            if start <= e.occurred_on <= end and (category is None or e.category == category)
        ),
        Decimal("0"),
    )


def budget_status(
    expenses: Iterable[MonetaryRecord],
    budgets: Iterable[Budget],
    as_of: date,
    config: Optional[GoalConfig] = None,
) -> list[BudgetStatus]:
    """
    Measure each budget against spending in its current period.

    A budget whose category is ``"Total"`` counts every expense.

    Args:
        expenses: Expense records
        budgets: Budgets to evaluate
        as_of: Date that selects the current day, week or month
        config: Supplies the near-limit percentage

    Returns:
        One BudgetStatus per budget, in input order
    """
    config = config or GoalConfig()
    expenses = list(expenses)
    statuses = []

    for budget in budgets:
        start, end = budget_window(budget.period, as_of)
        category = None if budget.category == TOTAL_BUDGET_CATEGORY else budget.category
        spent = _spent(expenses, start, end, category)
        percentage = spent / budget.limit * HUNDRED if budget.limit > 0 else Decimal("0")

        statuses.append(
            BudgetStatus(
                budget_id=budget.id,
                category=budget.category,
                limit=budget.limit,
                period_start=start,
                period_end=end,
                spent=spent,
                remaining=max(Decimal("0"), budget.limit - spent),
                percentage=percentage,
                is_over_budget=spent > budget.limit,
                is_near_limit=config.near_limit_percent <= percentage < HUNDRED,
            )
        )

    over = sum(1 for s in statuses if s.is_over_budget)
    if over:
        logger.info("budgets_exceeded", count=over, as_of=as_of.isoformat())
    return statuses


def goal_progress(
    goal: SpendingGoal,
    expenses: Iterable[MonetaryRecord],
    as_of: date,
    baseline_multiplier: Optional[Decimal] = None,
    config: Optional[GoalConfig] = None,
) -> GoalProgress:
    """
    Evaluate a goal against recorded expenses.

    - ``save_amount``: savings are measured against an assumed spending
      baseline of ``target * baseline_multiplier``
    - ``reduce_category``: spending in the goal's category is measured
      against the target as a limit
    - ``total_limit``: spending in the month of ``as_of`` is measured
      against the target as a limit

    Before the deadline a goal is active until it reaches 100%: a savings
    goal then completes, a limit goal fails. After the deadline a savings
    goal completes at 100% and a limit goal completes if it stayed under.

    Args:
        goal: The goal to evaluate
        expenses: Expense records
        as_of: Evaluation date
        baseline_multiplier: Overrides the configured savings baseline
        config: Goal heuristics

    Returns:
        GoalProgress with current amount, percent progress and status
    """
    config = config or GoalConfig()
    multiplier = (
        baseline_multiplier
        if baseline_multiplier is not None
        else config.savings_baseline_multiplier
    )
    expenses = list(expenses)

    if goal.type == GoalType.REDUCE_CATEGORY and goal.category:
        relevant = [e for e in expenses if e.category == goal.category]
    elif goal.type == GoalType.TOTAL_LIMIT:
        start, end = month_bounds(as_of.year, as_of.month)
        relevant = [e for e in expenses if start <= e.occurred_on <= end]
    else:
        relevant = expenses

    current = sum((e.amount for e in relevant), Decimal("0"))

    if goal.type == GoalType.SAVE_AMOUNT:
        savings = max(Decimal("0"), goal.target_amount * multiplier - current)
        progress = min(HUNDRED, savings / goal.target_amount * HUNDRED)
    else:
        progress = min(HUNDRED, current / goal.target_amount * HUNDRED)

    reached = progress >= HUNDRED
    if as_of > goal.deadline:
        if goal.type == GoalType.SAVE_AMOUNT:
            status = GoalStatus.COMPLETED if reached else GoalStatus.FAILED
        else:
            status = GoalStatus.FAILED if reached else GoalStatus.COMPLETED
    elif reached:
        status = GoalStatus.COMPLETED if goal.type == GoalType.SAVE_AMOUNT else GoalStatus.FAILED
    else:
        status = GoalStatus.ACTIVE

    return GoalProgress(
        goal_id=goal.id,
        current_amount=current,
        progress=progress,
        status=status,
    )
