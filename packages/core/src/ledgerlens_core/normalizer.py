"""Amount, date and description normalization.

Every function here is total: malformed input degrades to a default
(``Decimal("0")``, today's date, ``"Transaction"``) instead of raising, so a
single bad cell never fails a whole statement.
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser

PLACEHOLDER_DESCRIPTION = "Transaction"

# Spreadsheet serial 25569 is 1970-01-01
SPREADSHEET_EPOCH_OFFSET = 25569
MAX_SPREADSHEET_SERIAL = 2958465  # 9999-12-31

# Two parse defaults differing in day, month and year
_PARTIAL_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

CURRENCY_SYMBOLS = "₦$£€"

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_STRIP_PATTERN = re.compile(rf"[{CURRENCY_SYMBOLS},\s()]")
_NUMBER_PATTERN = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
_SERIAL_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")
_NUMERIC_DATE_PATTERN = re.compile(r"^(\d{1,4})[/\-.](\d{1,2})[/\-.](\d{1,4})$")
_MONTH_NAME_PATTERN = re.compile(
    r"(\d{1,2})[\s\-/]+([A-Za-z]{3})[A-Za-z]*\.?[\s\-/,]+(\d{2,4})"
)
_DESCRIPTION_NOISE = re.compile(r"[^\w\s\-.]")
_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# AMOUNTS
# =============================================================================

def parse_amount(raw: Any) -> Decimal:
    """Parse a locale-formatted money value into a non-negative Decimal.

    Currency symbols, thousands separators and whitespace are removed.
    Parenthesised and minus-signed values are accepted, but only the
    magnitude is returned; read the sign with :func:`is_negative_amount`
    first if it matters.

    Args:
        raw: A string, number or None.

    Returns:
        The absolute amount, or ``Decimal("0")`` when nothing numeric is found.
    """
    if raw is None or isinstance(raw, bool):
        return Decimal("0")

    if isinstance(raw, (int, float, Decimal)):
        try:
            value = Decimal(str(raw))
        except InvalidOperation:
            return Decimal("0")
        return abs(value) if value.is_finite() else Decimal("0")

    cleaned = _STRIP_PATTERN.sub("", str(raw))
    match = _NUMBER_PATTERN.search(cleaned)
    if not match:
        return Decimal("0")

    try:
        value = Decimal(match.group())
    except InvalidOperation:
        return Decimal("0")
    return abs(value) if value.is_finite() else Decimal("0")


def _sign_text(raw: Any) -> str:
    return re.sub(rf"[{CURRENCY_SYMBOLS}\s]", "", str(raw)).upper()


def is_negative_amount(raw: Any) -> bool:
    """Whether a raw amount is written as money out.

    Recognises a leading minus, accounting parentheses and a trailing DR.
    """
    if raw is None or isinstance(raw, bool):
        return False
    if isinstance(raw, (int, float, Decimal)):
        return raw < 0
    text = _sign_text(raw)
    if not text:
        return False
    return (
        text.startswith("-")
        or (text.startswith("(") and text.endswith(")"))
        or text.endswith("DR")
    )


def is_explicit_credit(raw: Any) -> bool:
    """Whether a raw amount is explicitly marked as money in (``+`` or CR)."""
    if raw is None or isinstance(raw, (bool, int, float, Decimal)):
        return False
    text = _sign_text(raw)
    return text.startswith("+") or text.endswith("CR")


# =============================================================================
# DATES
# =============================================================================

def _from_serial(serial: float) -> Optional[date]:
    if not math.isfinite(serial) or not 0 < serial <= MAX_SPREADSHEET_SERIAL:
        return None
    millis = (serial - SPREADSHEET_EPOCH_OFFSET) * 86400 * 1000
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    try:
        return (epoch + timedelta(milliseconds=millis)).date()
    except OverflowError:
        return None


def _from_generic(text: str) -> Optional[date]:
    """Generic parse, accepted only when the text gives day, month and year.

    dateutil fills missing parts from its default, so the text is parsed
    against two defaults that differ in every part; a partial date resolves
    differently under each and is rejected.
    """
    try:
        first, second = (
            date_parser.parse(text, default=default).date()
            for default in _PARTIAL_DATE_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    return first if first == second else None


def _from_numeric_parts(text: str) -> Optional[date]:
    match = _NUMERIC_DATE_PATTERN.match(text)
    if not match:
        return None

    first, month, last = match.groups()
    if len(first) >= 3:
        year, day = int(first), int(last)
    else:
        day, year = int(first), int(last)
    month_num = int(month)

    if year > 1900 and month_num <= 12 and day <= 31:
        try:
            return date(year, month_num, day)
        except ValueError:
            return None
    return None


def _from_month_name(text: str) -> Optional[date]:
    match = _MONTH_NAME_PATTERN.search(text)
    if not match:
        return None

    day, month_name, year = match.groups()
    month = MONTHS.get(month_name.lower())
    if month is None:
        return None
    year_num = int(year)
    if year_num < 100:
        year_num += 2000
    try:
        return date(year_num, month, int(day))
    except ValueError:
        return None


def format_date(raw: Any, today: Optional[date] = None) -> str:
    """Normalize a heterogeneous date value to ``YYYY-MM-DD``.

    Tried in order: date objects, spreadsheet serial numbers, generic parsing,
    ``DD/MM/YYYY`` style (``/``, ``-`` or ``.`` separators, either end may be
    the year), and ``DD Mon YYYY``.

    Partial dates such as a bare time, month or ``YYYY-MM`` count as
    unparsable.

    Unparsable input returns ``today`` (the processing date) rather than
    failing, which can silently place a transaction in the current period.

    Args:
        raw: Cell or regex group value.
        today: Fallback date, defaults to ``date.today()``.

    Returns:
        ISO formatted date string.
    """
    fallback = (today or date.today()).isoformat()

    if raw is None or isinstance(raw, bool):
        return fallback
    if isinstance(raw, datetime):
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, (int, float, Decimal)):
        parsed = _from_serial(float(raw))
        return parsed.isoformat() if parsed else fallback

    text = str(raw).strip()
    if not text:
        return fallback

    if _SERIAL_PATTERN.match(text):
        parsed = _from_serial(float(text))
        return parsed.isoformat() if parsed else fallback

    parsed = _from_generic(text) or _from_numeric_parts(text) or _from_month_name(text)
    if parsed:
        return parsed.isoformat()

    return fallback


# =============================================================================
# DESCRIPTIONS
# =============================================================================

def clean_description(raw: Any, max_length: int = 100) -> str:
    """Strip punctuation noise, collapse whitespace and cap the length."""
    if raw is None:
        return PLACEHOLDER_DESCRIPTION

    text = _DESCRIPTION_NOISE.sub(" ", str(raw))
    text = _WHITESPACE.sub(" ", text).strip()
    text = text[:max_length].strip()
    return text or PLACEHOLDER_DESCRIPTION
