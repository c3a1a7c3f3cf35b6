"""Derived analytics models.

Everything in this module is recomputed from records on each analysis pass
and is never persisted as ground truth:
- Monthly and annual aggregates
- Detected spending patterns
- Trend forecasts
- Spending suggestions, budget status and goal progress
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


# =============================================================================
# AGGREGATES
# =============================================================================

class CategoryShare(BaseModel):
    """A category's amount and its share of the period total."""

    category: str
    amount: Decimal
    percentage: Decimal = Field(description="Share of the period total (0-100)")


class PeriodDelta(BaseModel):
    """Change of a period against the period immediately before it."""

    expense_delta: Decimal
    expense_percentage: Decimal = Field(
        description="Expense change as a percentage of the previous period (0 when it was zero)"
    )
    income_delta: Decimal
    net_flow_delta: Decimal


class MonthlyAggregate(BaseModel):
    """Expense and income totals for one calendar month."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "period_key": "2025-03",
                    "year": 2025,
                    "month": 3,
                    "label": "March 2025",
                    "total_expense": "1830.00",
                    "total_income": "4200.00",
                    "per_category_expense": {"Groceries": "430.00"},
                }
            ]
        }
    }

    period_key: str = Field(description="Year-month key, e.g. '2025-03'")
    year: int = Field(ge=1900, le=2100)
    month: int = Field(ge=1, le=12)
    label: str = Field(description="Human-readable label, e.g. 'March 2025'")
    total_expense: Decimal = Field(default=Decimal("0"), ge=0)
    total_income: Decimal = Field(default=Decimal("0"), ge=0)
    per_category_expense: dict[str, Decimal] = Field(default_factory=dict)
    per_category_income: dict[str, Decimal] = Field(default_factory=dict)
    expense_count: int = Field(default=0, ge=0)
    income_count: int = Field(default=0, ge=0)
    average_per_day: Decimal = Field(default=Decimal("0"))
    top_category: Optional[CategoryShare] = None
    top_income_source: Optional[CategoryShare] = None
    delta_from_previous: Optional[PeriodDelta] = None

    @computed_field
    @property
    def net_flow(self) -> Decimal:
        """Income minus expenses."""
        return self.total_income - self.total_expense


class TrendDirection(str, Enum):
    """Direction of a half-year comparison."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class TrendSummary(BaseModel):
    """First-half vs second-half comparison of monthly averages."""

    direction: TrendDirection = TrendDirection.STABLE
    percentage: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Absolute percentage change between the two halves",
    )


class PeriodAmount(BaseModel):
    """A month identified by key and label with an associated amount."""

    period_key: str
    label: str
    amount: Decimal


class AnnualAggregate(BaseModel):
    """Roll-up of twelve monthly aggregates."""

    year: int
    total_expense: Decimal
    total_income: Decimal
    monthly: list[MonthlyAggregate] = Field(default_factory=list)
    category_totals: dict[str, Decimal] = Field(default_factory=dict)
    income_totals: dict[str, Decimal] = Field(default_factory=dict)
    average_monthly_expense: Decimal
    average_monthly_income: Decimal
    highest_expense_month: PeriodAmount
    lowest_expense_month: PeriodAmount
    highest_income_month: PeriodAmount
    expense_trend: TrendSummary
    income_trend: TrendSummary

    @computed_field
    @property
    def net_flow(self) -> Decimal:
        """Income minus expenses for the year."""
        return self.total_income - self.total_expense


# =============================================================================
# PATTERNS
# =============================================================================

class PatternKind(str, Enum):
    """Kinds of detected spending pattern."""

    RECURRING = "recurring"
    ANOMALY = "anomaly"


class PatternFrequency(str, Enum):
    """Cadence inferred from the mean interval between occurrences."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SpendingPattern(BaseModel):
    """A recurring cluster or a statistical outlier within a category."""

    id: str
    kind: PatternKind
    category: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    frequency: PatternFrequency
    average_amount: Decimal
    occurrence_count: int = Field(ge=1)
    last_occurrence: date
    next_predicted: Optional[date] = None
    z_score: Optional[float] = Field(
        default=None,
        description="Distance from the category mean in standard deviations (anomalies only)",
    )


# =============================================================================
# FORECASTS
# =============================================================================

class ProjectedPeriod(BaseModel):
    """One forward month of a trend forecast."""

    period_key: str
    step: int = Field(ge=1, description="1 for the next period, 2 for the one after, ...")
    seasonal_factor: Decimal
    expense_estimate: Decimal
    income_estimate: Decimal

    @computed_field
    @property
    def net_flow_estimate(self) -> Decimal:
        """Projected income minus projected expenses."""
        return self.income_estimate - self.expense_estimate


class TrendForecast(BaseModel):
    """Next-period and year-end extrapolation from recent history."""

    history_size: int = Field(ge=0, description="Number of periods actually used")
    next_period_key: Optional[str] = None
    trend_factor: Decimal = Decimal("1")
    next_period_estimate: Decimal = Decimal("0")
    next_period_income_estimate: Decimal = Decimal("0")
    income_trend_factor: Decimal = Decimal("1")
    confidence: float = Field(ge=0.0, le=1.0)
    year_end_estimate: Decimal = Decimal("0")
    per_category_forecast: dict[str, Decimal] = Field(default_factory=dict)
    projected_periods: list[ProjectedPeriod] = Field(default_factory=list)


# =============================================================================
# SUGGESTIONS
# =============================================================================

class SuggestionType(str, Enum):
    """Kinds of spending suggestion."""

    CATEGORY_WARNING = "category_warning"
    BUDGET_OPTIMIZATION = "budget_optimization"
    HABIT_CHANGE = "habit_change"


class Impact(str, Enum):
    """Expected impact of acting on a suggestion."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SpendingSuggestion(BaseModel):
    """An actionable observation derived from aggregates and patterns."""

    id: str
    type: SuggestionType
    title: str
    description: str
    impact: Impact
    potential_savings: Optional[Decimal] = None
    action_required: str
    category: Optional[str] = None
    priority: int = Field(ge=0, le=10)


# =============================================================================
# BUDGETS AND GOALS
# =============================================================================

class BudgetPeriod(str, Enum):
    """Window a budget limit applies to."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


TOTAL_BUDGET_CATEGORY = "Total"


class Budget(BaseModel):
    """A spending limit for a category (or ``"Total"``) over a period."""

    id: str
    category: str
    limit: Decimal = Field(ge=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY


class BudgetStatus(BaseModel):
    """How much of a budget has been used in its current window."""

    budget_id: str
    category: str
    limit: Decimal
    period_start: date
    period_end: date
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    is_over_budget: bool
    is_near_limit: bool


class GoalType(str, Enum):
    """Kinds of spending goal."""

    SAVE_AMOUNT = "save_amount"
    REDUCE_CATEGORY = "reduce_category"
    TOTAL_LIMIT = "total_limit"


class GoalStatus(str, Enum):
    """Lifecycle status of a goal."""

    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class SpendingGoal(BaseModel):
    """A user-defined savings or spending-limit goal."""

    id: str
    title: str
    type: GoalType
    target_amount: Decimal = Field(gt=0)
    category: Optional[str] = None
    deadline: date


class GoalProgress(BaseModel):
    """Evaluation of a goal against recorded expenses."""

    goal_id: str
    current_amount: Decimal
    progress: Decimal = Field(ge=0, le=100, description="Percent complete (0-100)")
    status: GoalStatus
