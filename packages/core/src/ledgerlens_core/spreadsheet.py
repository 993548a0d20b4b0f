"""Spreadsheet statement ingestion (CSV, XLS, XLSX).

Bank exports rarely start with the column header: most carry a preamble of
account details first. The ingester scans the leading rows for a header,
maps columns to fields by substring heuristics, then turns every following
row into a canonical transaction.
"""

import csv
import io
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Optional

import pandas as pd
import structlog

from .categorizer import categorize
from .classifier import classify_type
from .exceptions import ExtractionError
from .models import Transaction, TransactionType
from .normalizer import clean_description, format_date, is_negative_amount, parse_amount

logger = structlog.get_logger()

Grid = list[list[Any]]

# =============================================================================
# HEADER HEURISTICS
# =============================================================================

# A row is the header when at least two terms of one pattern appear in it.
HEADER_PATTERNS: list[tuple[str, ...]] = [
    ("date", "description", "amount"),
    ("date", "narration", "debit", "credit"),
    ("transaction date", "narration", "amount debit", "amount credit", "current balance"),
    ("trans date", "value date", "narration", "debit", "credit", "balance"),
    ("posting date", "details", "withdrawal", "lodgement", "balance"),
    ("date", "particulars", "withdrawals", "deposits", "balance"),
    ("date", "remarks", "money in", "money out", "balance"),
    ("date", "details", "amount", "balance"),
]

MIN_HEADER_TERMS = 2

COLUMN_CANDIDATES: dict[str, tuple[str, ...]] = {
    "date": ("transaction date", "trans date", "value date", "posting date", "date"),
    "description": (
        "description", "narration", "details", "particulars", "remarks",
        "memo", "payee",
    ),
    "debit": ("debit", "withdrawal", "money out", "amount out", "paid out"),
    "credit": ("credit", "deposit", "lodgement", "money in", "amount in", "paid in"),
    "amount": ("amount",),
    "balance": ("balance",),
    "reference": ("reference", "ref", "cheque", "check no", "transaction id"),
}

_EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}
_CSV_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


@dataclass(frozen=True)
class ColumnMap:
    """Column index per semantic field, -1 when the column is absent."""

    date: int = -1
    description: int = -1
    debit: int = -1
    credit: int = -1
    amount: int = -1
    balance: int = -1
    reference: int = -1


# =============================================================================
# GRID LOADING
# =============================================================================

def load_grid(content: bytes, extension: str) -> Grid:
    """Read raw statement bytes into a 2-D list of cell values.

    CSV is decoded with encoding fallbacks and a sniffed delimiter; ragged
    preamble rows are kept as-is. Excel files are read from the first sheet
    with no header inference. Empty cells become ``None``.
    """
    extension = extension.lower().lstrip(".")
    if extension == "csv":
        return _load_csv(content)
    if extension in _EXCEL_ENGINES:
        return _load_excel(content, extension)
    raise ValueError(f"Not a spreadsheet extension: {extension}")


def _load_csv(content: bytes) -> Grid:
    text = None
    for encoding in _CSV_ENCODINGS:
        try:
            text = content.decode(encoding)
            break
        except UnicodeDecodeError:
            continue

    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t|")
    except csv.Error:
        dialect = csv.excel

    rows = csv.reader(io.StringIO(text, newline=""), dialect)
    return [[cell if cell.strip() else None for cell in row] for row in rows]


def _load_excel(content: bytes, extension: str) -> Grid:
    engine = _EXCEL_ENGINES[extension]
    try:
        df = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=object,
            engine=engine,
        )
    except Exception as e:
        raise ExtractionError(
            f"Failed to read spreadsheet: {e}",
            document_type=extension,
        ) from e

    df = df.dropna(how="all")
    return df.astype(object).where(pd.notna(df), None).values.tolist()


# =============================================================================
# HEADER AND COLUMN RESOLUTION
# =============================================================================

def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def find_header_row(grid: Grid, max_rows: int = 15) -> int:
    """Index of the header row among the first ``max_rows`` rows.

    Falls back to row 0 when no row matches any pattern.
    """
    for index, row in enumerate(grid[:max_rows]):
        if not row:
            continue
        joined = "|".join(_text(cell).lower() for cell in row)
        for pattern in HEADER_PATTERNS:
            hits = sum(1 for term in pattern if term in joined)
            if hits >= MIN_HEADER_TERMS:
                return index
    return 0


def _find_column(header: list[str], candidates: tuple[str, ...], exclude: tuple[int, ...] = ()) -> int:
    """Find the first header cell containing any candidate."""
    for i, cell in enumerate(header):
        if i in exclude:
            continue
        if any(candidate in cell for candidate in candidates):
            return i
    return -1


def resolve_columns(header: list[Any]) -> ColumnMap:
    """Map each semantic field to a column index of the header row."""
    header_lower = [_text(cell).lower() for cell in header]

    debit = _find_column(header_lower, COLUMN_CANDIDATES["debit"])
    credit = _find_column(header_lower, COLUMN_CANDIDATES["credit"], exclude=(debit,))
    amount = _find_column(header_lower, COLUMN_CANDIDATES["amount"], exclude=(debit, credit))

    return ColumnMap(
        date=_find_column(header_lower, COLUMN_CANDIDATES["date"]),
        description=_find_column(header_lower, COLUMN_CANDIDATES["description"]),
        debit=debit,
        credit=credit,
        amount=amount,
        balance=_find_column(header_lower, COLUMN_CANDIDATES["balance"], exclude=(debit, credit, amount)),
        reference=_find_column(header_lower, COLUMN_CANDIDATES["reference"]),
    )


# =============================================================================
# ROW EXTRACTION
# =============================================================================

def _cell(row: list[Any], index: int) -> Optional[Any]:
    if index < 0 or index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_row(
    row: list[Any],
    columns: ColumnMap,
    source_file: Optional[str],
    description_max_length: int,
) -> Optional[Transaction]:
    """Parse a single row into a transaction, or None to skip it."""
    date_raw = _cell(row, columns.date)
    desc_raw = _cell(row, columns.description)
    debit_raw = _cell(row, columns.debit)
    credit_raw = _cell(row, columns.credit)
    amount_raw = _cell(row, columns.amount)

    if all(v is None for v in (date_raw, desc_raw, debit_raw, credit_raw, amount_raw)):
        return None

    description_text = _text(desc_raw)

    # Structured columns are authoritative; debit wins when both are filled
    debit = parse_amount(debit_raw)
    credit = parse_amount(credit_raw)
    if debit > 0:
        amount, txn_type = debit, TransactionType.EXPENSE
    elif credit > 0:
        amount, txn_type = credit, TransactionType.INCOME
    else:
        amount = parse_amount(amount_raw)
        if amount <= 0:
            return None
        txn_type = classify_type(description_text, amount_raw)

    balance: Optional[Decimal] = None
    balance_raw = _cell(row, columns.balance)
    if balance_raw is not None:
        balance = parse_amount(balance_raw)
        if is_negative_amount(balance_raw):
            balance = -balance

    reference_raw = _cell(row, columns.reference)

    return Transaction(
        date=format_date(date_raw),
        description=clean_description(description_text, description_max_length),
        amount=amount,
        type=txn_type,
        category=categorize(description_text),
        balance=balance,
        reference=_text(reference_raw) or None,
        original_description=description_text or None,
        source_file=source_file,
    )


def extract_transactions(
    grid: Grid,
    *,
    source_file: Optional[str] = None,
    header_scan_rows: int = 15,
    description_max_length: int = 100,
) -> list[Transaction]:
    """Extract canonical transactions from a raw spreadsheet grid.

    Args:
        grid: Rows of raw cell values.
        source_file: File name recorded on each transaction.
        header_scan_rows: Number of leading rows searched for the header.
        description_max_length: Cap for cleaned descriptions.

    Returns:
        Transactions in sheet order. Unusable rows are dropped.
    """
    if not grid:
        return []

    header_index = find_header_row(grid, header_scan_rows)
    columns = resolve_columns(grid[header_index])

    logger.info(
        "spreadsheet_header_detected",
        file=source_file,
        header_row=header_index,
        columns=asdict(columns),
    )

    transactions: list[Transaction] = []
    skipped = 0
    for row_number, row in enumerate(grid[header_index + 1:], start=header_index + 1):
        if not row or len(row) < 2:
            continue
        try:
            txn = _parse_row(row, columns, source_file, description_max_length)
        except (ValueError, TypeError) as e:
            skipped += 1
            logger.debug("row_parse_error", row=row_number, error=str(e))
            continue
        if txn is None:
            skipped += 1
            continue
        transactions.append(txn)

    logger.info(
        "spreadsheet_transactions_extracted",
        file=source_file,
        count=len(transactions),
        skipped=skipped,
    )
    return transactions
