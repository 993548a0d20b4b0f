"""File ingestion facade.

Validates an uploaded statement, dispatches it by extension to the
spreadsheet or PDF pipeline, and applies the final cleaning gate shared by
both. Only records passing that gate are surfaced for review.

Usage:
    from ledgerlens_core import StatementFile, parse_file

    transactions = parse_file(StatementFile.from_path("statement_jan.pdf"))
"""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Union

import structlog

from .config import IngestionSettings
from .exceptions import (
    EmptyFileError,
    FileTooLargeError,
    NoTransactionsError,
    UnsupportedFileTypeError,
)
from .models import Transaction, TransactionType
from .normalizer import clean_description
from .pdf_parser import PdfTransactionParser
from .pdf_text import PdfPlumberTextExtractor, TextExtractor, read_pdf_lines
from .spreadsheet import extract_transactions, load_grid

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("pdf", "csv", "xls", "xlsx")

_EMITTED_TYPES = (TransactionType.INCOME, TransactionType.EXPENSE)


@dataclass(frozen=True)
class StatementFile:
    """An uploaded statement: file name (drives dispatch) and raw bytes."""

    name: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower().lstrip(".")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "StatementFile":
        """Read a statement from disk."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Statement file not found: {path}")
        return cls(name=path.name, content=path.read_bytes())


StatementSource = Union[StatementFile, str, Path]


class StatementIngestor:
    """
    Parses bank statement files into canonical transactions.

    Each call works on its own local data, so one ingestor can serve
    concurrent parses. The PDF text extractor is owned by the ingestor and
    set up once on first use.
    """

    def __init__(
        self,
        settings: Optional[IngestionSettings] = None,
        text_extractor: Optional[TextExtractor] = None,
        today: Optional[date] = None,
    ):
        """
        Initialize the ingestor.

        Args:
            settings: Thresholds and limits; defaults load from the environment.
            text_extractor: PDF backend, defaults to pdfplumber.
            today: Fallback date for unparsable dates, defaults to the
                processing date.
        """
        self._settings = settings or IngestionSettings()
        self._extractor = text_extractor or PdfPlumberTextExtractor()
        self._today = today

    @property
    def settings(self) -> IngestionSettings:
        return self._settings

    def parse_file(self, source: StatementSource) -> list[Transaction]:
        """
        Parse a statement into reviewed-ready transactions.

        Args:
            source: A StatementFile, or a path to read.

        Returns:
            Canonical transactions. Never empty.

        Raises:
            EmptyFileError: The file has no content.
            FileTooLargeError: The file exceeds the size cap.
            UnsupportedFileTypeError: The extension is not pdf/csv/xls/xlsx.
            ScannedDocumentError: A PDF carries too little text.
            ExtractionError: The document cannot be opened or read.
            NoTransactionsError: Nothing usable was extracted.
        """
        file = source if isinstance(source, StatementFile) else StatementFile.from_path(source)
        self.validate(file)

        logger.info(
            "parsing_statement",
            file=file.name,
            extension=file.extension,
            size=file.size,
        )

        if file.extension == "pdf":
            raw = self._parse_pdf(file)
        else:
            raw = self._parse_spreadsheet(file)

        transactions = self._finalize(raw)
        if not transactions:
            logger.warning("no_transactions_extracted", file=file.name, raw_count=len(raw))
            raise NoTransactionsError(source=file.name, document_type=file.extension)

        logger.info(
            "statement_parsed",
            file=file.name,
            count=len(transactions),
            dropped=len(raw) - len(transactions),
        )
        return transactions

    async def parse_file_async(self, source: StatementSource) -> list[Transaction]:
        """Run :meth:`parse_file` in a worker thread.

        There is no cancellation: an abandoned call still runs to completion.
        """
        return await asyncio.to_thread(self.parse_file, source)

    def validate(self, file: StatementFile) -> None:
        """Reject empty, oversized and unsupported files before any parsing."""
        if file.size == 0:
            raise EmptyFileError(file.name)
        if file.size >= self._settings.max_file_size_bytes:
            raise FileTooLargeError(file.size, self._settings.max_file_size_bytes, file.name)
        if file.extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileTypeError(file.extension, SUPPORTED_EXTENSIONS)

    def _parse_pdf(self, file: StatementFile) -> list[Transaction]:
        lines = read_pdf_lines(
            file.content,
            self._extractor,
            tolerance=self._settings.line_tolerance,
            min_chars=self._settings.min_document_chars,
            source=file.name,
        )
        parser = PdfTransactionParser(self._settings, today=self._today)
        return parser.parse(lines, source_file=file.name)

    def _parse_spreadsheet(self, file: StatementFile) -> list[Transaction]:
        grid = load_grid(file.content, file.extension)
        return extract_transactions(
            grid,
            source_file=file.name,
            header_scan_rows=self._settings.header_scan_rows,
            description_max_length=self._settings.description_max_length,
        )

    def _finalize(self, transactions: list[Transaction]) -> list[Transaction]:
        """Final gate shared by both paths.

        Drops records without a description or positive amount, re-cleans
        descriptions, forces income/expense and assigns missing ids.
        """
        final: list[Transaction] = []
        for txn in transactions:
            if txn.amount <= 0 or not txn.description.strip():
                continue
            updates = {
                "description": clean_description(
                    txn.description, self._settings.description_max_length
                ),
            }
            if txn.type not in _EMITTED_TYPES:
                updates["type"] = TransactionType.EXPENSE
            if not txn.id:
                updates["id"] = str(uuid.uuid4())
            final.append(txn.model_copy(update=updates))
        return final


def parse_file(
    source: StatementSource,
    settings: Optional[IngestionSettings] = None,
) -> list[Transaction]:
    """Parse a statement with a default :class:`StatementIngestor`."""
    return StatementIngestor(settings).parse_file(source)


async def parse_file_async(
    source: StatementSource,
    settings: Optional[IngestionSettings] = None,
) -> list[Transaction]:
    """Async variant of :func:`parse_file`."""
    return await StatementIngestor(settings).parse_file_async(source)
