"""Committing reviewed transactions to a persistence backend.

The backend is anything implementing :class:`TransactionStore`. Records are
submitted one at a time; a failure stops the commit and reports how many
records were already written.
"""

from typing import Any, Iterable, Protocol, runtime_checkable

import structlog

from .exceptions import StoreError
from .models import Transaction, TransactionCategory

logger = structlog.get_logger()


@runtime_checkable
class TransactionStore(Protocol):
    """Persistence backend for reviewed transactions."""

    def create(self, user_id: str, record: dict[str, Any]) -> Any:
        """Persist one record for a user."""
        ...


def to_store_record(transaction: Transaction) -> dict[str, Any]:
    """The subset of fields the store keeps for a transaction."""
    category = transaction.category or TransactionCategory.UNCATEGORIZED
    return {
        "date": transaction.date.isoformat(),
        "description": transaction.description,
        "amount": transaction.amount,
        "type": transaction.type.value,
        "category": category.value,
    }


def commit_transactions(
    store: TransactionStore,
    user_id: str,
    transactions: Iterable[Transaction],
) -> int:
    """
    Write reviewed transactions to the store in order.

    Args:
        store: Persistence backend.
        user_id: Owner of the records.
        transactions: Records the user approved.

    Returns:
        Number of records committed.

    Raises:
        StoreError: The backend failed; ``committed`` counts prior writes.
    """
    committed = 0
    for txn in transactions:
        try:
            store.create(user_id, to_store_record(txn))
        except Exception as e:
            logger.error(
                "transaction_commit_failed",
                user_id=user_id,
                committed=committed,
                error=str(e),
            )
            raise StoreError(
                f"Failed to save transactions after {committed} records: {e}",
                committed=committed,
            ) from e
        committed += 1

    logger.info("transactions_committed", user_id=user_id, count=committed)
    return committed
