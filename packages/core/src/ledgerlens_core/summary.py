"""Aggregate statistics over a set of canonical transactions."""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Union

import structlog

from .models import MonthlySummary, Transaction, TransactionSummary, TransactionType

logger = structlog.get_logger()

TWO_PLACES = Decimal("0.01")

TransactionLike = Union[Transaction, Mapping[str, Any]]


def _coerce(item: TransactionLike) -> Transaction:
    if isinstance(item, Transaction):
        return item
    return Transaction.model_validate(dict(item))


def summarize(transactions: Iterable[TransactionLike]) -> TransactionSummary:
    """
    Compute totals and breakdowns for a set of transactions.

    Args:
        transactions: Transaction models or plain mappings (snake_case or
            camelCase keys).

    Returns:
        TransactionSummary. An empty input yields zero totals and empty maps.
    """
    records = [_coerce(t) for t in transactions]
    if not records:
        return TransactionSummary()

    revenue = Decimal("0")
    expenses = Decimal("0")
    by_category: dict[str, Decimal] = defaultdict(Decimal)
    by_type: dict[str, Decimal] = defaultdict(Decimal)
    months: dict[str, MonthlySummary] = {}

    for txn in records:
        by_category[txn.category.value] += txn.amount
        by_type[txn.type.value] += txn.amount

        # Refunds, transfers and investments only appear in the per-type breakdown
        if txn.type not in (TransactionType.INCOME, TransactionType.EXPENSE):
            continue

        month = months.setdefault(txn.date.strftime("%Y-%m"), MonthlySummary())
        if txn.type == TransactionType.INCOME:
            revenue += txn.amount
            month.income += txn.amount
        else:
            expenses += txn.amount
            month.expenses += txn.amount
        month.net = month.income - month.expenses

    amounts = [t.amount for t in records]
    average = (sum(amounts, Decimal("0")) / len(amounts)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    summary = TransactionSummary(
        total_transactions=len(records),
        total_revenue=revenue,
        total_expenses=expenses,
        net_income=revenue - expenses,
        avg_transaction_amount=average,
        largest_transaction=max(amounts),
        smallest_transaction=min(amounts),
        transactions_by_category=dict(by_category),
        transactions_by_type=dict(by_type),
        monthly_breakdown=dict(sorted(months.items())),
    )

    logger.info(
        "transactions_summarized",
        count=summary.total_transactions,
        revenue=str(revenue),
        expenses=str(expenses),
        months=len(months),
    )
    return summary
