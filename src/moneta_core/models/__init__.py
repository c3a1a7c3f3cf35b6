"""Data models for moneta-core.

This package provides the engine's input records and derived results:
- Expense/income records, subscriptions, assets and liabilities (financial.py)
- Aggregates, patterns, forecasts, suggestions, budgets (analytics.py)
- Loan payoff, net worth and cash flow results (projections.py)
- Bulk recurring materialization results (recurring.py)
"""

from moneta_core.models.financial import (
    # Enumerations
    Frequency,
    RecordKind,
    ExpenseCategory,
    IncomeCategory,
    AssetCategory,
    LiabilityCategory,
    # Records
    MonetaryRecord,
    Subscription,
    Asset,
    Liability,
)

from moneta_core.models.analytics import (
    # Aggregates
    CategoryShare,
    PeriodDelta,
    MonthlyAggregate,
    TrendDirection,
    TrendSummary,
    PeriodAmount,
    AnnualAggregate,
    # Patterns
    PatternKind,
    PatternFrequency,
    SpendingPattern,
    # Forecasts
    ProjectedPeriod,
    TrendForecast,
    # Suggestions
    SuggestionType,
    Impact,
    SpendingSuggestion,
    # Budgets and goals
    TOTAL_BUDGET_CATEGORY,
    BudgetPeriod,
    Budget,
    BudgetStatus,
    GoalType,
    GoalStatus,
    SpendingGoal,
    GoalProgress,
)

from moneta_core.models.projections import (
    AmortizationRow,
    ExtraPaymentScenario,
    PayoffProjection,
    NotComputableReason,
    NotComputable,
    NetWorthDelta,
    NetWorthSnapshot,
    CashFlowProjection,
)

from moneta_core.models.recurring import (
    MaterializationOptions,
    GeneratedCounts,
    MaterializationResult,
    RecurringAnalysis,
    BulkValidation,
    DeduplicationResult,
    RecurringPreview,
    RecurringStats,
    BillingRun,
    UpcomingBill,
    SubscriptionStats,
)

__all__ = [
    # Enumerations
    "Frequency",
    "RecordKind",
    "ExpenseCategory",
    "IncomeCategory",
    "AssetCategory",
    "LiabilityCategory",
    # Records
    "MonetaryRecord",
    "Subscription",
    "Asset",
    "Liability",
    # Aggregates
    "CategoryShare",
    "PeriodDelta",
    "MonthlyAggregate",
    "TrendDirection",
    "TrendSummary",
    "PeriodAmount",
    "AnnualAggregate",
    # Patterns
    "PatternKind",
    "PatternFrequency",
    "SpendingPattern",
    # Forecasts
    "ProjectedPeriod",
    "TrendForecast",
    # Suggestions
    "SuggestionType",
    "Impact",
    "SpendingSuggestion",
    # Budgets and goals
    "TOTAL_BUDGET_CATEGORY",
    "BudgetPeriod",
    "Budget",
    "BudgetStatus",
    "GoalType",
    "GoalStatus",
    "SpendingGoal",
    "GoalProgress",
    # Loan payoff, net worth, cash flow
    "AmortizationRow",
    "ExtraPaymentScenario",
    "PayoffProjection",
    "NotComputableReason",
    "NotComputable",
    "NetWorthDelta",
    "NetWorthSnapshot",
    "CashFlowProjection",
    # Bulk recurring
    "MaterializationOptions",
    "GeneratedCounts",
    "MaterializationResult",
    "RecurringAnalysis",
    "BulkValidation",
    "DeduplicationResult",
    "RecurringPreview",
    "RecurringStats",
    "BillingRun",
    "UpcomingBill",
    "SubscriptionStats",
]
