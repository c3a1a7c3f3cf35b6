"""Tests for the loan amortization calculator."""

from datetime import date
from decimal import Decimal

import pytest

from moneta_core.amortization import LoanAmortizationCalculator
from moneta_core.config import AmortizationConfig
from moneta_core.models import Liability, NotComputable, NotComputableReason, PayoffProjection


@pytest.fixture
def credit_card() -> Liability:
    """1200 balance at 24% APR with a 100 minimum payment."""
    return Liability(
        id="card",
        name="Credit Card",
        category="Credit Cards",
        current_balance=Decimal("1200"),
        interest_rate=Decimal("24"),
        minimum_payment=Decimal("100"),
    )


class TestLoanAmortizationCalculator:
    """Test suite for LoanAmortizationCalculator."""

    def test_returns_projection(self, credit_card: Liability):
        result = LoanAmortizationCalculator().amortize(credit_card)

        assert isinstance(result, PayoffProjection)
        assert result.is_computable is True
        assert result.monthly_rate == Decimal("0.02")

    def test_first_month_split(self, credit_card: Liability):
        """First month: interest 24, principal 76."""
        result = LoanAmortizationCalculator().amortize(credit_card)
        first = result.schedule[0]

        assert first.period == 1
        assert first.interest == Decimal("24")
        assert first.principal == Decimal("76")
        assert first.remaining_balance == Decimal("1124")

    def test_balance_strictly_decreases_to_payoff(self, credit_card: Liability):
        result = LoanAmortizationCalculator().amortize(credit_card)
        balances = [row.remaining_balance for row in result.schedule]

        assert result.months_remaining > 1
        assert result.months_remaining == len(result.schedule)
        assert all(later < earlier for earlier, later in zip(balances, balances[1:]))
        assert balances[-1] <= Decimal("0.01")

    def test_totals_are_consistent(self, credit_card: Liability):
        result = LoanAmortizationCalculator().amortize(credit_card)

        assert result.total_interest == sum(row.interest for row in result.schedule)
        principal_paid = result.starting_balance - result.schedule[-1].remaining_balance
        assert abs(result.total_paid - (principal_paid + result.total_interest)) < Decimal("0.000001")

    def test_last_payment_not_overpaid(self, credit_card: Liability):
        """The final period pays only what is left."""
        result = LoanAmortizationCalculator().amortize(credit_card)
        last = result.schedule[-1]
        assert last.payment <= Decimal("100")
        assert last.payment == last.principal + last.interest

    def test_dated_schedule(self, credit_card: Liability):
        result = LoanAmortizationCalculator().amortize(credit_card, start_date=date(2025, 1, 31))

        assert result.schedule[0].period_date == date(2025, 2, 28)
        assert result.payoff_date == result.schedule[-1].period_date

    def test_undated_schedule(self, credit_card: Liability):
        result = LoanAmortizationCalculator().amortize(credit_card)
        assert result.payoff_date is None
        assert result.schedule[0].period_date is None

    def test_extra_payment_scenarios(self, credit_card: Liability):
        """Each extra payment pays the loan off faster with less interest."""
        result = LoanAmortizationCalculator().amortize(credit_card)
        scenarios = result.extra_payment_scenarios

        assert [s.extra_amount for s in scenarios] == [
            Decimal("50"),
            Decimal("100"),
            Decimal("200"),
            Decimal("500"),
        ]
        for scenario in scenarios:
            assert scenario.months_to_payoff < result.months_remaining
            assert scenario.months_saved == result.months_remaining - scenario.months_to_payoff
            assert scenario.interest_saved > 0
            assert scenario.monthly_payment == Decimal("100") + scenario.extra_amount

        months = [s.months_to_payoff for s in scenarios]
        assert months == sorted(months, reverse=True)

    def test_custom_extra_payments(self, credit_card: Liability):
        config = AmortizationConfig(extra_payment_amounts=[Decimal("25")])
        result = LoanAmortizationCalculator(config).amortize(credit_card)
        assert len(result.extra_payment_scenarios) == 1

    def test_zero_interest_loan(self):
        loan = Liability(
            id="family",
            name="Family Loan",
            current_balance=Decimal("300"),
            interest_rate=Decimal("0"),
            minimum_payment=Decimal("100"),
        )
        result = LoanAmortizationCalculator().amortize(loan)

        assert result.months_remaining == 3
        assert result.total_interest == Decimal("0")


class TestNotComputable:
    """Liabilities that cannot be projected return NotComputable."""

    def test_missing_rate(self):
        loan = Liability(id="l", name="Loan", current_balance=1000, minimum_payment=50)
        result = LoanAmortizationCalculator().amortize(loan)

        assert isinstance(result, NotComputable)
        assert result.is_computable is False
        assert result.reason == NotComputableReason.MISSING_TERMS

    def test_missing_payment(self):
        loan = Liability(id="l", name="Loan", current_balance=1000, interest_rate=5)
        result = LoanAmortizationCalculator().amortize(loan)
        assert result.reason == NotComputableReason.MISSING_TERMS

    def test_payment_equal_to_interest(self):
        """A payment that only covers interest never amortizes."""
        loan = Liability(
            id="l",
            name="Loan",
            current_balance=Decimal("1200"),
            interest_rate=Decimal("24"),
            minimum_payment=Decimal("24"),
        )
        result = LoanAmortizationCalculator().amortize(loan)
        assert result.reason == NotComputableReason.PAYMENT_BELOW_INTEREST

    def test_step_cap(self, credit_card: Liability):
        config = AmortizationConfig(max_periods=5)
        result = LoanAmortizationCalculator(config).amortize(credit_card)

        assert isinstance(result, NotComputable)
        assert result.reason == NotComputableReason.STEP_CAP_EXCEEDED

    def test_result_serializes(self, credit_card: Liability):
        result = LoanAmortizationCalculator().amortize(credit_card)
        dumped = result.model_dump()
        assert dumped["liability_id"] == "card"
        assert "total_paid" in dumped
