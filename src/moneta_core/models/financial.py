"""Input record models consumed by the engine.

This module provides the plain records the engine reads:
- Expense and income entries (MonetaryRecord), including recurring seeds
- Subscriptions with a derived next-billing date
- Assets and liabilities for net worth and loan payoff

Records are storage-agnostic: callers load rows, CSV lines or JSON blobs
into these models and hand them to the engine.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator


class Frequency(str, Enum):
    """Calendar step used to expand recurring entries."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RecordKind(str, Enum):
    """Whether a monetary record is money out or money in."""

    EXPENSE = "expense"
    INCOME = "income"


class ExpenseCategory(str, Enum):
    """Built-in expense categories. Custom category strings are also accepted."""

    FOOD = "Food"
    GROCERIES = "Groceries"
    DINING_OUT = "Dining Out"
    TRANSPORTATION = "Transportation"
    GAS_FUEL = "Gas/Fuel"
    PUBLIC_TRANSPORT = "Public Transport"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    CLOTHING = "Clothing"
    ELECTRONICS = "Electronics"
    BILLS = "Bills"
    RENT_MORTGAGE = "Rent/Mortgage"
    UTILITIES = "Utilities"
    INTERNET_PHONE = "Internet/Phone"
    INSURANCE = "Insurance"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    FITNESS_SPORTS = "Fitness/Sports"
    PERSONAL_CARE = "Personal Care"
    GIFTS = "Gifts"
    CHARITY = "Charity"
    BUSINESS = "Business"
    OTHER = "Other"


class IncomeCategory(str, Enum):
    """Built-in income categories."""

    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENT = "Investment"
    RENTAL = "Rental"
    BUSINESS = "Business"
    GIFT = "Gift"
    BONUS = "Bonus"
    OTHER = "Other"


class AssetCategory(str, Enum):
    """Asset groupings used for net worth breakdowns."""

    CASH = "Cash & Bank Accounts"
    INVESTMENTS = "Investments"
    REAL_ESTATE = "Real Estate"
    VEHICLES = "Vehicles"
    PERSONAL_PROPERTY = "Personal Property"
    RETIREMENT = "Retirement Accounts"
    OTHER = "Other Assets"


class LiabilityCategory(str, Enum):
    """Liability groupings used for net worth breakdowns."""

    CREDIT_CARDS = "Credit Cards"
    STUDENT_LOANS = "Student Loans"
    MORTGAGE = "Mortgage"
    AUTO_LOANS = "Auto Loans"
    PERSONAL_LOANS = "Personal Loans"
    OTHER = "Other Debts"


def _coerce_decimal(v):
    if isinstance(v, (str, int, float)) and not isinstance(v, bool):
        try:
            return Decimal(str(v))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {v!r}") from None
    return v


def _coerce_category(v):
    # str enums are stored by value so grouping keys stay plain strings
    if isinstance(v, Enum):
        return v.value
    return v


class MonetaryRecord(BaseModel):
    """A single expense or income entry.

    Immutable once materialized. A recurring *definition* is itself a
    MonetaryRecord with ``is_recurring=True`` and a frequency; expansion
    reads it and never modifies it.
    """

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "inc-001",
                    "kind": "income",
                    "amount": "4200.00",
                    "category": "Salary",
                    "description": "Paycheck",
                    "occurred_on": "2025-01-01",
                    "is_recurring": True,
                    "frequency": "monthly",
                }
            ]
        },
    }

    id: str = Field(description="Stable identifier of the record")
    kind: RecordKind = Field(
        default=RecordKind.EXPENSE,
        description="Expense (money out) or income (money in)",
    )
    amount: Decimal = Field(gt=0, description="Positive amount in currency units")
    category: str = Field(description="Category label (built-in or custom)")
    description: str = Field(default="", description="Free-text description")
    occurred_on: date = Field(description="Calendar date of the entry")
    is_recurring: bool = Field(
        default=False,
        description="True when this record seeds a recurring series",
    )
    frequency: Optional[Frequency] = Field(
        default=None,
        description="Recurrence step; required when is_recurring is True",
    )
    subscription_id: Optional[str] = Field(
        default=None,
        description="Subscription that generated this expense, if any",
    )

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and numeric amounts to Decimal."""
        return _coerce_decimal(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category_to_str(cls, v):
        """Store enum categories by their string value."""
        return _coerce_category(v)

    @property
    def dedup_key(self) -> tuple[RecordKind, date, str, Decimal]:
        """Exact-match key used to detect duplicate materializations."""
        return (self.kind, self.occurred_on, self.description, self.amount)


class Subscription(BaseModel):
    """A recurring bill.

    ``next_billing`` is never stored: it is recomputed on every read from
    ``last_billed`` (or ``start_date`` when nothing has been billed yet)
    plus one frequency step.
    """

    model_config = {"frozen": True}

    id: str
    name: str
    amount: Decimal = Field(gt=0)
    frequency: Frequency
    start_date: date
    end_date: Optional[date] = None
    category: str = ExpenseCategory.BILLS.value
    is_active: bool = True
    auto_generate: bool = True
    last_billed: Optional[date] = None

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and numeric amounts to Decimal."""
        return _coerce_decimal(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category_to_str(cls, v):
        """Store enum categories by their string value."""
        return _coerce_category(v)

    @computed_field
    @property
    def next_billing(self) -> date:
        """Next billing date derived from the last billing (or start) date."""
        from ..dates import add_period

        return add_period(self.last_billed or self.start_date, self.frequency)


class Asset(BaseModel):
    """Something owned, valued at its current worth."""

    id: str
    name: str
    category: str = AssetCategory.OTHER.value
    current_value: Decimal = Field(ge=0)

    @field_validator("current_value", mode="before")
    @classmethod
    def coerce_value_to_decimal(cls, v):
        """Coerce string and numeric values to Decimal."""
        return _coerce_decimal(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category_to_str(cls, v):
        """Store enum categories by their string value."""
        return _coerce_category(v)


class Liability(BaseModel):
    """A debt with an outstanding balance.

    A liability is amortizable only when both ``interest_rate`` and
    ``minimum_payment`` are present and the payment exceeds the first
    month's interest.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "loan-1",
                    "name": "Credit Card",
                    "category": "Credit Cards",
                    "current_balance": "1200.00",
                    "interest_rate": "24",
                    "minimum_payment": "100",
                }
            ]
        }
    }

    id: str
    name: str
    category: str = LiabilityCategory.OTHER.value
    current_balance: Decimal = Field(ge=0)
    interest_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual percentage rate, e.g. 24 for 24%",
    )
    minimum_payment: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Scheduled monthly payment",
    )

    @field_validator("current_balance", "interest_rate", "minimum_payment", mode="before")
    @classmethod
    def coerce_money_to_decimal(cls, v):
        """Coerce string and numeric money fields to Decimal."""
        return _coerce_decimal(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category_to_str(cls, v):
        """Store enum categories by their string value."""
        return _coerce_category(v)

    @property
    def monthly_rate(self) -> Optional[Decimal]:
        """Monthly periodic rate derived from the annual percentage."""
        if self.interest_rate is None:
            return None
        return self.interest_rate / Decimal("100") / Decimal("12")
