"""Transaction parsing for reconstructed PDF statement lines.

Each supported line layout is a named pattern whose named groups define the
field mapping. Patterns are tried in priority order and the first match
wins; lines matching none are dropped. Results are validated, deduplicated
and ordered most recent first.

Layouts follow statements from Nigerian banks and fintechs, e.g.::

    05 Jan 2024 10:15:32 05 Jan 2024 Transfer to Ada Obi -5,000.00 45,000.00 Mobile 000013240105
    05/01/2024 POS PURCHASE SHOPRITE IKEJA 12,500.00 487,500.00
    05/01/2024 SMS ALERT CHARGES 50.00
    05/01/2024 | POS SHOPRITE | 1,000.00 | 5,000.00
    05/01/2024 SALARY JAN - 150,000.00 155,000.00
    10:15 Airtime MTN 08031234567 -1,000.00 44,000.00 USSD
"""

import re
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

import structlog
from rapidfuzz.distance import Levenshtein

from .categorizer import categorize
from .classifier import classify_type
from .config import IngestionSettings
from .models import Transaction, TransactionType
from .normalizer import clean_description, format_date, is_negative_amount, parse_amount

logger = structlog.get_logger()


# =============================================================================
# LINE LAYOUTS
# =============================================================================

class LineLayout(str, Enum):
    """Statement line shapes understood by the parser."""

    TIMESTAMPED = "timestamped"
    PIPE_TABLE = "pipe_table"
    DATE_DESC_DEBIT_CREDIT_BALANCE = "date_desc_debit_credit_balance"
    DATE_DESC_AMOUNT_BALANCE = "date_desc_amount_balance"
    DATE_DESC_AMOUNT = "date_desc_amount"
    TIME_DESC_AMOUNT_BALANCE_CHANNEL = "time_desc_amount_balance_channel"


_DATE = (
    r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"
    r"|\d{4}-\d{1,2}-\d{1,2}"
    r"|\d{1,2}[\s\-/][A-Za-z]{3,9}[\s\-/,]+\d{2,4}"
)
_TIME = r"\d{1,2}:\d{2}(?::\d{2})?(?:\s?[AaPp][Mm])?"
_AMOUNT = r"\(?[-+]?[₦$£€]?\d[\d,]*\.\d{2}\)?(?:CR|DR|Cr|Dr)?"
_LOOSE_AMOUNT = r"\(?[-+]?[₦$£€]?\d[\d,]*(?:\.\d{1,2})?\)?(?:CR|DR|Cr|Dr)?"
_BALANCE = r"-?[₦$£€]?\d[\d,]*\.\d{2}(?:CR|DR|Cr|Dr)?"
_CHANNEL = r"[A-Za-z][A-Za-z0-9_\-/]*"
_REFERENCE = r"[A-Za-z0-9\-/]{6,40}"
_CELL_SEP = r"\s*[|\t]\s*"
_EMPTY_CELL = r"-"


@dataclass(frozen=True)
class TransactionPattern:
    """A named line layout and its compiled expression.

    Named groups map onto fields: ``date``, ``value_date``, ``time``,
    ``description``, ``amount``, ``debit``, ``credit``, ``balance``,
    ``channel``, ``reference``. Layouts with ``debit`` and ``credit`` columns
    take their direction from whichever column is filled.
    """

    layout: LineLayout
    regex: re.Pattern


# Priority order: richer layouts first so their extra columns are not
# swallowed into the description of a simpler layout.
TRANSACTION_PATTERNS: list[TransactionPattern] = [
    TransactionPattern(
        LineLayout.TIMESTAMPED,
        re.compile(
            rf"^(?P<date>{_DATE})\s+(?P<time>{_TIME})\s+"
            rf"(?:(?P<value_date>{_DATE})\s+)?"
            rf"(?P<description>.+?)\s+(?P<amount>{_AMOUNT})\s+(?P<balance>{_BALANCE})\s+"
            rf"(?P<channel>{_CHANNEL})\s+(?P<reference>{_REFERENCE})$"
        ),
    ),
    TransactionPattern(
        LineLayout.PIPE_TABLE,
        re.compile(
            rf"^\|?\s*(?P<date>{_DATE}){_CELL_SEP}(?P<description>[^|\t]+?){_CELL_SEP}"
            rf"(?P<amount>{_LOOSE_AMOUNT})(?:{_CELL_SEP}(?P<balance>{_BALANCE}))?\s*\|?$"
        ),
    ),
    TransactionPattern(
        LineLayout.DATE_DESC_DEBIT_CREDIT_BALANCE,
        re.compile(
            rf"^(?P<date>{_DATE})\s+(?P<description>.+?)\s+"
            rf"(?P<debit>{_AMOUNT}|{_EMPTY_CELL})\s+(?P<credit>{_AMOUNT}|{_EMPTY_CELL})\s+"
            rf"(?P<balance>{_BALANCE})$"
        ),
    ),
    TransactionPattern(
        LineLayout.DATE_DESC_AMOUNT_BALANCE,
        re.compile(
            rf"^(?P<date>{_DATE})\s+(?P<description>.+?)\s+"
            rf"(?P<amount>{_AMOUNT})\s+(?P<balance>{_BALANCE})$"
        ),
    ),
    TransactionPattern(
        LineLayout.DATE_DESC_AMOUNT,
        re.compile(
            rf"^(?P<date>{_DATE})\s+(?P<description>.+?)\s+(?P<amount>{_LOOSE_AMOUNT})$"
        ),
    ),
    TransactionPattern(
        LineLayout.TIME_DESC_AMOUNT_BALANCE_CHANNEL,
        re.compile(
            rf"^(?P<time>{_TIME})\s+(?P<description>.+?)\s+(?P<amount>{_AMOUNT})\s+"
            rf"(?P<balance>{_BALANCE})\s+(?P<channel>{_CHANNEL})$"
        ),
    ),
]

# Header and boilerplate words; whole-word, case-insensitive
NOISE_KEYWORDS: tuple[str, ...] = (
    "statement", "balance", "total", "page", "bank", "bvn",
    "transaction date", "value date", "narration", "opening", "closing",
    "account number", "account name", "account no", "period", "summary",
    "currency",
)
_NOISE_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in NOISE_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

# Descriptions carrying these words are mis-parsed summary rows
SUMMARY_WORDS: tuple[str, ...] = ("balance", "total", "summary")

MIN_LINE_TOKENS = 3


# =============================================================================
# LINE FILTERING AND MATCHING
# =============================================================================

def is_noise_line(line: str, min_length: int = 10) -> bool:
    """Whether a line is a header, footer or other non-transaction text."""
    stripped = line.strip()
    if len(stripped) < min_length:
        return True
    if not any(ch.isdigit() for ch in stripped):
        return True
    if len(stripped.split()) < MIN_LINE_TOKENS:
        return True
    return bool(_NOISE_PATTERN.search(stripped))


def match_line(line: str) -> Optional[tuple[TransactionPattern, re.Match]]:
    """Return the first pattern matching the line, with its match."""
    stripped = line.strip()
    for pattern in TRANSACTION_PATTERNS:
        match = pattern.regex.match(stripped)
        if match:
            return pattern, match
    return None


# =============================================================================
# DEDUPLICATION
# =============================================================================

def description_similarity(first: str, second: str) -> float:
    """Normalized Levenshtein similarity: ``1 - distance / max(len)``."""
    return Levenshtein.normalized_similarity(first.lower(), second.lower())


def deduplicate(
    transactions: Iterable[Transaction],
    similarity: float = 0.8,
    amount_tolerance: Decimal = Decimal("0.01"),
) -> list[Transaction]:
    """Drop near-identical transactions, keeping the first occurrence.

    Two transactions are duplicates when they share a date, their amounts
    differ by less than ``amount_tolerance`` and their descriptions are more
    similar than ``similarity``.
    """
    unique: list[Transaction] = []
    for txn in transactions:
        duplicate = any(
            kept.date == txn.date
            and abs(kept.amount - txn.amount) < amount_tolerance
            and description_similarity(kept.description, txn.description) > similarity
            for kept in unique
        )
        if not duplicate:
            unique.append(txn)
    return unique


# =============================================================================
# PARSER
# =============================================================================

class PdfTransactionParser:
    """
    Turns reconstructed statement lines into canonical transactions.

    The parser is stateless between calls; the running "last seen date" used
    by time-only layouts lives only for the duration of :meth:`parse`.
    """

    def __init__(
        self,
        settings: Optional[IngestionSettings] = None,
        today: Optional[date] = None,
    ):
        """
        Args:
            settings: Thresholds; defaults are loaded from the environment.
            today: Fallback for lines whose date cannot be resolved.
        """
        self._settings = settings or IngestionSettings()
        self._today = today

    def parse(self, lines: list[str], source_file: Optional[str] = None) -> list[Transaction]:
        """Parse, validate, deduplicate and order transactions from lines."""
        today = self._today or date.today()
        transactions: list[Transaction] = []
        last_date: Optional[str] = None
        noise = 0
        unmatched = 0

        for line in lines:
            if is_noise_line(line, self._settings.min_line_length):
                noise += 1
                continue

            matched = match_line(line)
            if matched is None:
                unmatched += 1
                logger.debug("pdf_line_unmatched", line=line[:120])
                continue

            pattern, match = matched
            try:
                txn = self._build_transaction(pattern, match, source_file, today, last_date)
            except ValueError as e:
                logger.debug("pdf_line_parse_error", layout=pattern.layout.value, error=str(e))
                continue
            if txn is None:
                continue
            if pattern.layout != LineLayout.TIME_DESC_AMOUNT_BALANCE_CHANNEL:
                last_date = txn.date.isoformat()
            if self._is_valid(txn):
                transactions.append(txn)

        unique = deduplicate(
            transactions,
            self._settings.duplicate_similarity,
            self._settings.duplicate_amount_tolerance,
        )
        ordered = sorted(unique, key=lambda t: t.date, reverse=True)
        result = [t.model_copy(update={"id": str(uuid.uuid4())}) for t in ordered]

        logger.info(
            "pdf_transactions_parsed",
            file=source_file,
            lines=len(lines),
            noise=noise,
            unmatched=unmatched,
            duplicates=len(transactions) - len(unique),
            count=len(result),
        )
        return result

    def _build_transaction(
        self,
        pattern: TransactionPattern,
        match: re.Match,
        source_file: Optional[str],
        today: date,
        last_date: Optional[str],
    ) -> Optional[Transaction]:
        """Map a pattern's groups onto a transaction, or None if unusable."""
        groups = match.groupdict()

        description_raw = (groups.get("description") or "").strip()

        if "debit" in groups:
            debit = parse_amount(groups["debit"])
            credit = parse_amount(groups["credit"])
            if credit > 0:
                amount, txn_type = credit, TransactionType.INCOME
            elif debit > 0:
                amount, txn_type = debit, TransactionType.EXPENSE
            else:
                return None
        else:
            amount_raw = groups["amount"]
            amount = parse_amount(amount_raw)
            if amount <= 0:
                return None
            txn_type = classify_type(description_raw, amount_raw)

        date_raw = groups.get("value_date") or groups.get("date") or last_date

        balance: Optional[Decimal] = None
        if groups.get("balance"):
            balance = parse_amount(groups["balance"])
            if is_negative_amount(groups["balance"]):
                balance = -balance

        return Transaction(
            date=format_date(date_raw, today),
            description=clean_description(description_raw, self._settings.description_max_length),
            amount=amount,
            type=txn_type,
            category=categorize(description_raw),
            balance=balance,
            channel=groups.get("channel"),
            reference=groups.get("reference"),
            original_description=description_raw or None,
            source_file=source_file,
        )

    def _is_valid(self, txn: Transaction) -> bool:
        """Reject summary rows that slipped past the noise filter."""
        desc_lower = txn.description.lower()
        if any(word in desc_lower for word in SUMMARY_WORDS):
            logger.debug("pdf_summary_row_dropped", description=txn.description)
            return False
        return bool(txn.description.strip()) and txn.amount > 0
