"""Income versus expense classification.

Keyword inference is a fallback for sources that carry one amount column.
Statements with separate debit and credit columns decide direction from the
column alone and never call :func:`classify_type`.
"""

from typing import Any, Optional

from .models import TransactionType
from .normalizer import is_explicit_credit, is_negative_amount

# Checked before EXPENSE_KEYWORDS; first hit wins.
INCOME_KEYWORDS: tuple[str, ...] = (
    "transfer from", "trf from", "tfr from", "transfer in", "credit",
    "deposit", "salary", "interest", "refund", "received", "reversal",
    "inward", "dividend", "bonus", "incoming", "wage", "payroll",
    "lodgement", "cashback",
)

EXPENSE_KEYWORDS: tuple[str, ...] = (
    "airtime", "withdrawal", "transfer to", "trf to", "tfr to",
    "transfer out", "debit", "charge", "fee", "purchase", "atm", "pos",
    "bill", "payment", "commission", "levy", "outward", "fuel", "data",
    "subscription", "vat",
)

_TYPE_ALIASES: dict[str, TransactionType] = {
    "income": TransactionType.INCOME,
    "revenue": TransactionType.INCOME,
    "earning": TransactionType.INCOME,
    "expense": TransactionType.EXPENSE,
    "spending": TransactionType.EXPENSE,
    "cost": TransactionType.EXPENSE,
    "transfer": TransactionType.TRANSFER,
    "investment": TransactionType.INVESTMENT,
    "refund": TransactionType.REFUND,
}


def classify_type(description: str, amount: Optional[Any] = None) -> TransactionType:
    """Decide whether a transaction is income or expense.

    Order: income keywords, expense keywords, then the raw amount's sign as
    a tiebreak (an explicit ``+`` or CR marks income). Anything left is an
    expense; overstating income is worse than understating it.

    Args:
        description: Transaction narration.
        amount: Raw amount value as printed, before normalization.

    Returns:
        TransactionType.INCOME or TransactionType.EXPENSE.
    """
    desc_lower = (description or "").lower()

    if any(keyword in desc_lower for keyword in INCOME_KEYWORDS):
        return TransactionType.INCOME

    if any(keyword in desc_lower for keyword in EXPENSE_KEYWORDS):
        return TransactionType.EXPENSE

    if amount is not None:
        if is_negative_amount(amount):
            return TransactionType.EXPENSE
        if is_explicit_credit(amount):
            return TransactionType.INCOME

    return TransactionType.EXPENSE


def map_transaction_type(label: Optional[str]) -> TransactionType:
    """Map a free-text type label to a TransactionType, defaulting to expense."""
    normalized = (label or "").lower().strip()
    return _TYPE_ALIASES.get(normalized, TransactionType.EXPENSE)
