"""Reading-order text reconstruction from positioned PDF fragments.

PDF text comes out as loose runs of characters with page coordinates, not as
lines. This module gets those fragments from a pluggable backend and
rebuilds top-to-bottom, left-to-right text lines from them.
"""

import io
import logging
import math
from typing import Optional, Protocol, runtime_checkable

import pdfplumber
import structlog

from .exceptions import ExtractionError, ScannedDocumentError
from .models import TextFragment

logger = structlog.get_logger()

Pages = list[list[TextFragment]]


@runtime_checkable
class TextExtractor(Protocol):
    """Backend that turns PDF bytes into positioned fragments per page."""

    def setup(self) -> None:
        """Prepare the backend. Safe to call repeatedly."""
        ...

    def extract_fragments(self, content: bytes) -> Pages:
        """Return fragments for every page, in page order."""
        ...


class PdfPlumberTextExtractor:
    """
    Text extractor backed by pdfplumber.

    Each pdfplumber word becomes one fragment whose transform places it at the
    word's left edge and baseline in PDF space (y grows upward). Pages are
    read one at a time in document order.
    """

    def __init__(self) -> None:
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def setup(self) -> None:
        """One-time backend setup; later calls are no-ops."""
        if self._ready:
            return
        # pdfminer logs every malformed object at WARNING and below
        logging.getLogger("pdfminer").setLevel(logging.ERROR)
        logger.info("pdf_backend_ready", backend="pdfplumber", version=pdfplumber.__version__)
        self._ready = True

    def extract_fragments(self, content: bytes) -> Pages:
        self.setup()
        pages: Pages = []

        try:
            pdf = pdfplumber.open(io.BytesIO(content))
        except Exception as e:
            raise ExtractionError(
                "Failed to open PDF. The file may be corrupted or password protected.",
                document_type="pdf",
                details={"error": str(e)},
            ) from e

        with pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                try:
                    words = page.extract_words()
                except Exception as e:
                    logger.warning("pdf_page_extraction_failed", page=page_num, error=str(e))
                    pages.append([])
                    continue

                height = float(page.height)
                pages.append([
                    TextFragment(
                        text=word["text"],
                        transform=[1.0, 0.0, 0.0, 1.0, float(word["x0"]), height - float(word["bottom"])],
                    )
                    for word in words
                ])
                logger.debug("pdf_page_extracted", page=page_num, fragments=len(words))

        return pages


def _is_usable(fragment: TextFragment) -> bool:
    if not fragment.text or not fragment.text.strip():
        return False
    if not fragment.has_position:
        return False
    return math.isfinite(fragment.x) and math.isfinite(fragment.y)


def reconstruct_lines(pages: Pages, tolerance: float = 5.0) -> list[str]:
    """Rebuild reading-order text lines from positioned fragments.

    Fragments are ordered top-to-bottom then left-to-right. A new line starts
    whenever y moves more than ``tolerance`` units from the previous fragment;
    fragments within a line are joined by single spaces.

    Args:
        pages: Fragments per page, in page order.
        tolerance: Vertical jitter still treated as the same line.

    Returns:
        Lines of every page, concatenated in page order.
    """
    lines: list[str] = []

    for fragments in pages:
        positioned = sorted(
            (f for f in fragments if _is_usable(f)),
            key=lambda f: (-f.y, f.x),
        )

        groups: list[list[TextFragment]] = []
        last_y: Optional[float] = None
        for fragment in positioned:
            if not groups or abs(fragment.y - last_y) > tolerance:
                groups.append([])
            groups[-1].append(fragment)
            last_y = fragment.y

        for group in groups:
            group.sort(key=lambda f: f.x)
            lines.append(" ".join(f.text.strip() for f in group))

    return lines


def ensure_extractable(
    lines: list[str],
    min_chars: int = 50,
    source: Optional[str] = None,
) -> None:
    """Fail fast when a document has too little text to be text-based."""
    characters = sum(len(line) for line in lines)
    if characters < min_chars:
        logger.warning("pdf_text_insufficient", file=source, characters=characters)
        raise ScannedDocumentError(source=source, characters=characters)


def read_pdf_lines(
    content: bytes,
    extractor: Optional[TextExtractor] = None,
    *,
    tolerance: float = 5.0,
    min_chars: int = 50,
    source: Optional[str] = None,
) -> list[str]:
    """Extract fragments from PDF bytes and return reconstructed lines.

    Raises:
        ExtractionError: The PDF cannot be opened.
        ScannedDocumentError: The document carries too little text.
    """
    extractor = extractor or PdfPlumberTextExtractor()
    extractor.setup()

    pages = extractor.extract_fragments(content)
    lines = reconstruct_lines(pages, tolerance)

    logger.info(
        "pdf_text_reconstructed",
        file=source,
        pages=len(pages),
        lines=len(lines),
        characters=sum(len(line) for line in lines),
    )

    ensure_extractable(lines, min_chars, source)
    return lines
