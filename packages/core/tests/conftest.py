"""Shared fixtures for ledgerlens_core tests."""

import io
from datetime import date

import pytest
import structlog
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ledgerlens_core import logging_setup
from ledgerlens_core.config import IngestionSettings

FIXED_TODAY = date(2024, 3, 1)


def build_pdf(pages: list[list[str]]) -> bytes:
    """Render each page's lines top to bottom with reportlab."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    _, height = A4
    for lines in pages:
        y = height - 72
        for line in lines:
            pdf.setFont("Helvetica", 9)
            pdf.drawString(40, y, line)
            y -= 16
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


STATEMENT_LINES = [
    "ACCOUNT STATEMENT",
    "Account Name: Ada Obi",
    "Period: 01 Jan 2024 to 31 Jan 2024",
    "Date Narration Debit Credit Balance",
    "15 Jan 2024 SALARY PAYMENT ACME LTD 150,000.00 650,000.00",
    "16 Jan 2024 POS PURCHASE SHOPRITE IKEJA 12,500.00 637,500.00",
    "17 Jan 2024 SMS ALERT CHARGES 50.00",
    "Closing Balance 637,450.00",
]


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest.fixture
def settings() -> IngestionSettings:
    return IngestionSettings()


@pytest.fixture
def statement_pdf() -> bytes:
    """A text-based statement with three transactions."""
    return build_pdf([STATEMENT_LINES])


@pytest.fixture
def scanned_pdf() -> bytes:
    """A single blank page, standing in for an image-only scan."""
    return build_pdf([[]])


@pytest.fixture
def prose_pdf() -> bytes:
    """Plenty of text but no transaction lines."""
    return build_pdf([[
        "Thank you for choosing us for your everyday banking needs.",
        "Please review your account activity and report any issues promptly.",
        "Customer care is available every day of the week.",
    ]])


@pytest.fixture
def clean_csv() -> bytes:
    """A CSV export with an account preamble before the header row."""
    return (
        "Account Name,Ada Obi\n"
        "Account Number,0123456789\n"
        "Date,Description,Amount\n"
        "2024-01-05,Salary Payment,150000\n"
        "2024-01-06,Electricity Bill,-12000\n"
        "2024-01-07,Grocery Store,-8500.50\n"
    ).encode("utf-8")


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration made by a test."""
    yield
    structlog.reset_defaults()
    logging_setup._CONFIGURED = False
