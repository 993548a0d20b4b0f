"""Tests for PDF text reconstruction."""

import pytest

from ledgerlens_core.exceptions import ExtractionError, ScannedDocumentError
from ledgerlens_core.models import TextFragment
from ledgerlens_core.pdf_text import (
    PdfPlumberTextExtractor,
    TextExtractor,
    ensure_extractable,
    read_pdf_lines,
    reconstruct_lines,
)


def frag(text: str, x: float, y: float) -> TextFragment:
    return TextFragment(text=text, transform=[1, 0, 0, 1, x, y])


class StubExtractor:
    """In-memory backend returning fixed fragments."""

    def __init__(self, pages):
        self.pages = pages
        self.setup_calls = 0

    def setup(self) -> None:
        self.setup_calls += 1

    def extract_fragments(self, content: bytes):
        return self.pages


class TestReconstructLines:
    """Tests for reconstruct_lines."""

    def test_orders_top_to_bottom_left_to_right(self):
        page = [
            frag("500.00", 300, 700),
            frag("second", 50, 680),
            frag("first", 50, 700),
            frag("line", 120, 680),
        ]
        assert reconstruct_lines([page]) == ["first 500.00", "second line"]

    def test_jitter_within_tolerance_shares_line(self):
        page = [frag("A", 10, 700), frag("B", 40, 703), frag("C", 70, 698)]
        assert reconstruct_lines([page]) == ["A B C"]

    def test_gap_beyond_tolerance_splits(self):
        page = [frag("A", 10, 700), frag("B", 40, 690)]
        assert reconstruct_lines([page], tolerance=5.0) == ["A", "B"]
        assert reconstruct_lines([page], tolerance=15.0) == ["A B"]

    def test_skips_unpositioned_and_blank_fragments(self):
        page = [
            frag("kept", 10, 700),
            TextFragment(text="lost", transform=[1, 0]),
            frag("   ", 30, 700),
            frag("nan", float("nan"), 700),
        ]
        assert reconstruct_lines([page]) == ["kept"]

    def test_pages_concatenate_in_order(self):
        pages = [[frag("page one", 10, 100)], [], [frag("page three", 10, 800)]]
        assert reconstruct_lines(pages) == ["page one", "page three"]


class TestEnsureExtractable:
    """Tests for ensure_extractable."""

    def test_raises_below_threshold(self):
        with pytest.raises(ScannedDocumentError) as exc_info:
            ensure_extractable(["short"], min_chars=50, source="scan.pdf")
        assert exc_info.value.source == "scan.pdf"

    def test_passes_at_threshold(self):
        ensure_extractable(["x" * 50], min_chars=50)


class TestPdfPlumberTextExtractor:
    """Tests for the pdfplumber backend."""

    def test_satisfies_protocol(self):
        assert isinstance(PdfPlumberTextExtractor(), TextExtractor)

    def test_setup_is_one_time(self):
        extractor = PdfPlumberTextExtractor()
        assert extractor.ready is False
        extractor.setup()
        extractor.setup()
        assert extractor.ready is True

    def test_extracts_positioned_words(self, statement_pdf: bytes):
        pages = PdfPlumberTextExtractor().extract_fragments(statement_pdf)
        assert len(pages) == 1
        texts = [f.text for f in pages[0]]
        assert "SALARY" in texts
        assert all(f.has_position for f in pages[0])

    def test_unreadable_pdf_raises(self):
        with pytest.raises(ExtractionError):
            PdfPlumberTextExtractor().extract_fragments(b"%PDF-1.4 not really")


class TestReadPdfLines:
    """Tests for read_pdf_lines."""

    def test_reconstructs_statement(self, statement_pdf: bytes):
        lines = read_pdf_lines(statement_pdf)
        assert "15 Jan 2024 SALARY PAYMENT ACME LTD 150,000.00 650,000.00" in lines
        assert lines[0] == "ACCOUNT STATEMENT"

    def test_scanned_pdf_raises(self, scanned_pdf: bytes):
        with pytest.raises(ScannedDocumentError):
            read_pdf_lines(scanned_pdf, source="scan.pdf")

    def test_uses_injected_extractor(self):
        stub = StubExtractor([[frag("05/01/2024 SMS ALERT CHARGES 50.00 and more text here", 10, 700)]])
        lines = read_pdf_lines(b"ignored", stub, min_chars=10)
        assert lines == ["05/01/2024 SMS ALERT CHARGES 50.00 and more text here"]
        assert stub.setup_calls == 1
