"""Loan payoff and net worth result models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


# =============================================================================
# LOAN PAYOFF
# =============================================================================

class AmortizationRow(BaseModel):
    """One month of a payoff schedule."""

    period: int = Field(ge=1)
    period_date: Optional[date] = Field(
        default=None,
        description="Calendar date of the payment when a start date was supplied",
    )
    payment: Decimal = Field(description="Amount actually paid this period")
    principal: Decimal
    interest: Decimal
    remaining_balance: Decimal = Field(ge=0)


class ExtraPaymentScenario(BaseModel):
    """Re-simulated payoff with a larger monthly payment."""

    extra_amount: Decimal
    monthly_payment: Decimal
    months_to_payoff: int = Field(ge=0)
    months_saved: int
    total_interest: Decimal
    interest_saved: Decimal


class PayoffProjection(BaseModel):
    """Month-by-month payoff of a liability under its scheduled payment."""

    liability_id: str
    starting_balance: Decimal
    monthly_payment: Decimal
    monthly_rate: Decimal
    months_remaining: int = Field(ge=0)
    total_interest: Decimal
    payoff_date: Optional[date] = None
    schedule: list[AmortizationRow] = Field(default_factory=list)
    extra_payment_scenarios: list[ExtraPaymentScenario] = Field(default_factory=list)

    @property
    def is_computable(self) -> bool:
        """Projections are always computable; see NotComputable."""
        return True

    @computed_field
    @property
    def total_paid(self) -> Decimal:
        """Sum of all scheduled payments."""
        return sum((row.payment for row in self.schedule), Decimal("0"))


class NotComputableReason(str, Enum):
    """Why a payoff could not be projected."""

    MISSING_TERMS = "missing_terms"
    PAYMENT_BELOW_INTEREST = "payment_below_interest"
    STEP_CAP_EXCEEDED = "step_cap_exceeded"


class NotComputable(BaseModel):
    """Typed 'could not compute' outcome of a payoff calculation.

    An expected business result, not an error: the calling layer decides how
    to present it.
    """

    liability_id: str
    reason: NotComputableReason
    message: str

    @property
    def is_computable(self) -> bool:
        """Always False."""
        return False


# =============================================================================
# NET WORTH
# =============================================================================

class NetWorthDelta(BaseModel):
    """Change against the previous snapshot."""

    assets_delta: Decimal
    liabilities_delta: Decimal
    net_worth_delta: Decimal
    percentage: Decimal = Field(
        description="Net worth change as a percentage of |previous net worth|; 0 when it was zero"
    )


class NetWorthSnapshot(BaseModel):
    """Point-in-time aggregate of assets and liabilities, keyed by date."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "snapshot_date": "2025-03-31",
                    "total_assets": "25000.00",
                    "total_liabilities": "8000.00",
                    "asset_breakdown": {"Investments": "25000.00"},
                    "liability_breakdown": {"Auto Loans": "8000.00"},
                }
            ]
        }
    }

    snapshot_date: date
    total_assets: Decimal = Field(ge=0)
    total_liabilities: Decimal = Field(ge=0)
    asset_breakdown: dict[str, Decimal] = Field(default_factory=dict)
    liability_breakdown: dict[str, Decimal] = Field(default_factory=dict)
    delta_from_previous: Optional[NetWorthDelta] = None

    @computed_field
    @property
    def net_worth(self) -> Decimal:
        """Total assets minus total liabilities, exactly."""
        return self.total_assets - self.total_liabilities


# =============================================================================
# CASH FLOW
# =============================================================================

class CashFlowProjection(BaseModel):
    """Monthly cash position once subscriptions and debt payments are included."""

    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_subscriptions: Decimal
    monthly_debt_payments: Decimal
    emergency_fund_recommendation: Decimal = Field(
        description="Six months of total monthly outgoings"
    )
    debt_to_income_ratio: Decimal = Field(
        description="Debt payments as a percentage of income (0 when income is zero)"
    )

    @computed_field
    @property
    def total_monthly_outgoings(self) -> Decimal:
        """Expenses, subscriptions and debt payments combined."""
        return self.monthly_expenses + self.monthly_subscriptions + self.monthly_debt_payments

    @computed_field
    @property
    def monthly_cash_flow(self) -> Decimal:
        """Income left after all outgoings."""
        return self.monthly_income - self.total_monthly_outgoings
