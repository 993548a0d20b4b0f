"""Serialization of reviewed transactions for API responses and downloads."""

import csv
import io
from typing import Any, Iterable

from .models import Transaction

CSV_COLUMNS: tuple[str, ...] = (
    "Date", "Description", "Amount", "Type", "Category", "Balance", "Reference",
)


def to_records(transactions: Iterable[Transaction]) -> list[dict[str, Any]]:
    """JSON-ready dicts with camelCase keys; unset optional fields are omitted."""
    return [
        t.model_dump(mode="json", by_alias=True, exclude_none=True)
        for t in transactions
    ]


def to_csv(transactions: Iterable[Transaction]) -> str:
    """Render transactions as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for t in transactions:
        writer.writerow([
            t.date.isoformat(),
            t.description,
            str(t.amount),
            t.type.value,
            t.category.value,
            "" if t.balance is None else str(t.balance),
            t.reference or "",
        ])
    return buffer.getvalue()
