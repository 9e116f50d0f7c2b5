import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


SEB_HEADER = "Bokföringsdatum;Valutadatum;Verifikationsnummer;Text;Belopp;Saldo"


@pytest.fixture()
def seb_csv_text() -> str:
    """A SEB export with two valid rows."""
    return "\n".join(
        [
            SEB_HEADER,
            "2023-01-05;2023-01-05;123;ICA Supermarket;-245,50;10000,00",
            "2023-01-06;2023-01-07;124;Lön;25000,00;35000,00",
        ]
    ) + "\n"
