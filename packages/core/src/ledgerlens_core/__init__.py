"""LedgerLens Core - Bank statement ingestion and transaction summaries."""

__version__ = "0.1.0"

from .categorizer import categorize
from .classifier import classify_type, map_transaction_type
from .config import IngestionSettings
from .export import to_csv, to_records
from .ingest import StatementFile, StatementIngestor, parse_file, parse_file_async
from .models import Transaction, TransactionCategory, TransactionSummary, TransactionType
from .normalizer import clean_description, format_date, parse_amount
from .summary import summarize

__all__ = [
    "IngestionSettings",
    "StatementFile",
    "StatementIngestor",
    "Transaction",
    "TransactionCategory",
    "TransactionSummary",
    "TransactionType",
    "categorize",
    "classify_type",
    "clean_description",
    "format_date",
    "map_transaction_type",
    "parse_amount",
    "parse_file",
    "parse_file_async",
    "summarize",
    "to_csv",
    "to_records",
]
