"""Core data models for bank-statement ingestion.

This module provides the canonical transaction record every ingestion path
converges to, the positioned text fragment consumed by the PDF reconstructor,
and the aggregate returned by the summary calculator.

Serialized field names are camelCase (``originalDescription``,
``totalRevenue``) to match the dashboard's record shape; Python attribute
names stay snake_case.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMERATIONS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction.

    The extraction pipeline only emits INCOME and EXPENSE. The other values
    arrive from manual entry and other subsystems.
    """

    INCOME = "income"
    EXPENSE = "expense"
    REFUND = "refund"
    TRANSFER = "transfer"
    INVESTMENT = "investment"


class TransactionCategory(str, Enum):
    """Fixed business category taxonomy. Values are display labels."""

    SALARY = "Salary"
    FOOD_GROCERIES = "Food & Groceries"
    TRANSPORTATION = "Transportation"
    UTILITIES = "Utilities"
    BANK_CHARGES = "Bank Charges"
    CASH_WITHDRAWAL = "Cash Withdrawal"
    SHOPPING = "Shopping"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    ENTERTAINMENT = "Entertainment"
    INSURANCE = "Insurance"
    LOAN_CREDIT = "Loan & Credit"
    INVESTMENT = "Investment"
    BUSINESS_INCOME = "Business Income"
    UNCATEGORIZED = "Uncategorized"


# =============================================================================
# CANONICAL TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """A single normalized transaction extracted from a statement.

    Amount is always a positive magnitude; direction is carried by ``type``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "date": "2024-01-05",
                    "description": "Salary Payment",
                    "amount": "150000",
                    "type": "income",
                    "category": "Salary",
                }
            ]
        },
    )

    id: Optional[str] = Field(
        default=None,
        description="Synthetic process-local identifier assigned per parse run",
    )
    date: dt.date = Field(description="Transaction or value date")
    description: str = Field(
        min_length=1,
        description="Cleaned transaction narration",
    )
    amount: Decimal = Field(
        gt=0,
        description="Positive transaction magnitude; direction is given by type",
    )
    type: TransactionType = Field(default=TransactionType.EXPENSE)
    category: TransactionCategory = Field(default=TransactionCategory.UNCATEGORIZED)
    balance: Optional[Decimal] = Field(
        default=None,
        description="Running balance as printed on the statement, informational only",
    )
    channel: Optional[str] = None
    reference: Optional[str] = None
    original_description: Optional[str] = Field(
        default=None,
        description="Narration before cleaning, kept for user review",
    )
    source_file: Optional[str] = None

    @field_validator("amount", "balance", mode="before")
    @classmethod
    def coerce_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal."""
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v


class TextFragment(BaseModel):
    """A positioned run of text as emitted by low-level PDF extraction.

    ``transform`` is the 6-element affine matrix ``[a, b, c, d, e, f]``;
    ``e`` and ``f`` are the x and y position in PDF space (y grows upward).
    """

    text: str
    transform: list[float] = Field(default_factory=list)

    @property
    def x(self) -> float:
        return float(self.transform[4])

    @property
    def y(self) -> float:
        return float(self.transform[5])

    @property
    def has_position(self) -> bool:
        """True when the transform carries usable x/y components."""
        return len(self.transform) >= 6


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class MonthlySummary(BaseModel):
    """Income and expenses for one ``YYYY-MM`` month."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net: Decimal = Decimal("0")


class TransactionSummary(BaseModel):
    """Aggregate statistics over a list of transactions."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_transactions: int = 0
    total_revenue: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")
    avg_transaction_amount: Decimal = Decimal("0")
    largest_transaction: Decimal = Decimal("0")
    smallest_transaction: Decimal = Decimal("0")
    transactions_by_category: dict[str, Decimal] = Field(default_factory=dict)
    transactions_by_type: dict[str, Decimal] = Field(default_factory=dict)
    monthly_breakdown: dict[str, MonthlySummary] = Field(default_factory=dict)
