"""Loan payoff simulation.

Monthly simple-interest amortization of a single liability:
    interest  = balance * (annual_rate / 100 / 12)
    principal = min(payment - interest, balance)
    balance  -= principal

The simulation stops once the balance is within the payoff epsilon or after
the step cap. Loans that cannot be paid off under their scheduled payment
are reported as a NotComputable value rather than raised.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

import structlog

from .config import AmortizationConfig
from .dates import add_months
from .models import (
    AmortizationRow,
    ExtraPaymentScenario,
    Liability,
    NotComputable,
    NotComputableReason,
    PayoffProjection,
)

logger = structlog.get_logger()

PayoffResult = Union[PayoffProjection, NotComputable]


class LoanAmortizationCalculator:
    """
    Project the payoff of a liability under its minimum payment.

    Alongside the baseline schedule, every configured extra payment is
    re-simulated from scratch to report months and interest saved.
    """

    def __init__(self, config: Optional[AmortizationConfig] = None):
        self.config = config or AmortizationConfig()

    def _simulate(
        self,
        balance: Decimal,
        monthly_rate: Decimal,
        payment: Decimal,
        start_date: Optional[date] = None,
    ) -> Optional[tuple[list[AmortizationRow], Decimal]]:
        """Run the month-by-month loop.

        Returns:
            (schedule, total_interest), or None when the step cap was hit
        """
        schedule: list[AmortizationRow] = []
        total_interest = Decimal("0")
        period = 0

        while balance > self.config.payoff_epsilon:
            if period >= self.config.max_periods:
                return None

            interest = balance * monthly_rate
            principal = min(payment - interest, balance)
            balance -= principal
            total_interest += interest
            period += 1

            schedule.append(
                AmortizationRow(
                    period=period,
                    period_date=add_months(start_date, period) if start_date else None,
                    payment=principal + interest,
                    principal=principal,
                    interest=interest,
                    remaining_balance=max(Decimal("0"), balance),
                )
            )

        return schedule, total_interest

    def amortize(
        self,
        liability: Liability,
        start_date: Optional[date] = None,
    ) -> PayoffResult:
        """
        Build the payoff projection for a liability.

        Args:
            liability: Debt with balance, annual rate and minimum payment
            start_date: Date the schedule counts months from; rows and the
                payoff date are left undated when omitted

        Returns:
            PayoffProjection, or NotComputable when a term is missing, the
            payment does not cover the first month's interest, or the loan
            would not be paid off within the step cap
        """
        if liability.interest_rate is None or liability.minimum_payment is None:
            return self._not_computable(
                liability,
                NotComputableReason.MISSING_TERMS,
                "Both interest rate and minimum payment are required",
            )

        balance = liability.current_balance
        monthly_rate = liability.monthly_rate
        payment = liability.minimum_payment

        if payment <= balance * monthly_rate:
            return self._not_computable(
                liability,
                NotComputableReason.PAYMENT_BELOW_INTEREST,
                f"Payment {payment} does not exceed monthly interest {balance * monthly_rate}",
            )

        simulated = self._simulate(balance, monthly_rate, payment, start_date)
        if simulated is None:
            return self._not_computable(
                liability,
                NotComputableReason.STEP_CAP_EXCEEDED,
                f"Loan is not paid off within {self.config.max_periods} months",
            )
        schedule, total_interest = simulated
        months = len(schedule)

        scenarios = [
            self._extra_payment_scenario(
                balance, monthly_rate, payment, extra, months, total_interest
            )
            for extra in self.config.extra_payment_amounts
        ]

        projection = PayoffProjection(
            liability_id=liability.id,
            starting_balance=balance,
            monthly_payment=payment,
            monthly_rate=monthly_rate,
            months_remaining=months,
            total_interest=total_interest,
            payoff_date=add_months(start_date, months) if start_date else None,
            schedule=schedule,
            extra_payment_scenarios=[s for s in scenarios if s is not None],
        )

        logger.info(
            "payoff_projected",
            liability_id=liability.id,
            months_remaining=months,
            total_interest=str(total_interest),
        )
        return projection

    def _extra_payment_scenario(
        self,
        balance: Decimal,
        monthly_rate: Decimal,
        payment: Decimal,
        extra: Decimal,
        baseline_months: int,
        baseline_interest: Decimal,
    ) -> Optional[ExtraPaymentScenario]:
        simulated = self._simulate(balance, monthly_rate, payment + extra)
        if simulated is None:
            return None
        schedule, total_interest = simulated

        return ExtraPaymentScenario(
            extra_amount=extra,
            monthly_payment=payment + extra,
            months_to_payoff=len(schedule),
            months_saved=baseline_months - len(schedule),
            total_interest=total_interest,
            interest_saved=baseline_interest - total_interest,
        )

    def _not_computable(
        self,
        liability: Liability,
        reason: NotComputableReason,
        message: str,
    ) -> NotComputable:
        logger.info(
            "payoff_not_computable",
            liability_id=liability.id,
            reason=reason.value,
        )
        return NotComputable(liability_id=liability.id, reason=reason, message=message)
