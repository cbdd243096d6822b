import io
import json
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.config.settings import Settings

INVOICE_LINES = [
    "INVOICE INV-2024-0042",
    "Acme Widgets Ltd, 12 High Street, Leeds LS1 4AB",
    "Company number 09876543  accounts@acme-widgets.example",
    "Bill to: Jane Smith, 3 Park Lane, York YO1 7HH",
    "Date: 2024-03-01   Due: 2024-03-31",
    "Total due: 1,250.00 GBP",
]


def _pdf(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        for offset, line in enumerate(lines):
            c.drawString(72, 720 - offset * 18, line)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf([["Hello PDF World"]])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    return _pdf([["Page one content"], ["Page two content"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return _pdf([[]])


@pytest.fixture()
def invoice_pdf_bytes() -> bytes:
    """Single-page PDF whose text layer is long enough for native extraction."""
    return _pdf([INVOICE_LINES])


@pytest.fixture()
def scanned_pdf_bytes() -> bytes:
    """Four blank pages: a PDF without any text layer."""
    return _pdf([[], [], [], []])


@pytest.fixture()
def large_png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (3000, 2000), (255, 255, 255, 255)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def small_png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (400, 300), "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        shared_secret="test-secret",
        api_key="test-key",
        analysis_provider="openai",
        disconnect_poll_seconds=0.05,
    )


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer test-secret"}


@pytest.fixture()
def mock_client() -> AsyncMock:
    """Provider client double; set ``create_chat_completion.return_value`` per test."""
    client = AsyncMock()
    client.create_chat_completion.return_value = json.dumps({})
    return client


DocumentFactory = Callable[..., dict[str, object]]


@pytest.fixture()
def make_document() -> DocumentFactory:
    """Build one document entry as the model returns it."""

    def _make(start_page: int, end_page: int, case_number: str = "INV-1") -> dict[str, object]:
        return {
            "startPage": start_page,
            "endPage": end_page,
            "sender": {
                "name": "Acme Widgets Ltd",
                "address": "12 High Street, Leeds",
                "companyNumber": "09876543",
                "email": "accounts@acme-widgets.example",
                "phone": None,
            },
            "receiver": {"name": "Jane Smith", "address": "3 Park Lane, York"},
            "documentDetails": {
                "caseNumber": case_number,
                "invoiceAmount": 1250.0,
                "dueDate": "2024-03-31",
                "dateCreated": "2024-03-01",
                "dateSent": None,
                "summary": "Invoice for widgets.",
                "documentType": "invoice",
            },
        }

    return _make
