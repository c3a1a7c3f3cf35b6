"""Monthly cash-flow projection including subscriptions and debt payments."""

from decimal import Decimal
from typing import Iterable

from .models import CashFlowProjection, Liability, Subscription
from .subscriptions import monthly_recurring_total

EMERGENCY_FUND_MONTHS = 6


def project_cash_flow(
    monthly_income: Decimal,
    monthly_expenses: Decimal,
    subscriptions: Iterable[Subscription],
    liabilities: Iterable[Liability],
) -> CashFlowProjection:
    """
    Combine income and spending with recurring obligations.

    Args:
        monthly_income: Typical monthly income
        monthly_expenses: Typical monthly discretionary spending
        subscriptions: Active subscriptions contribute their monthly equivalent
        liabilities: Minimum payments count as monthly debt payments

    Returns:
        CashFlowProjection with a six-month emergency fund recommendation
        and the debt-to-income ratio as a percentage
    """
    monthly_income = Decimal(str(monthly_income))
    monthly_expenses = Decimal(str(monthly_expenses))
    monthly_subscriptions = monthly_recurring_total(subscriptions)
    debt_payments = sum(
        (liability.minimum_payment or Decimal("0") for liability in liabilities),
        Decimal("0"),
    )

    outgoings = monthly_expenses + monthly_subscriptions + debt_payments
    ratio = debt_payments / monthly_income * 100 if monthly_income > 0 else Decimal("0")

    return CashFlowProjection(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_subscriptions=monthly_subscriptions,
        monthly_debt_payments=debt_payments,
        emergency_fund_recommendation=outgoings * EMERGENCY_FUND_MONTHS,
        debt_to_income_ratio=ratio,
    )
