import io
from pathlib import Path

import docx
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

LONG_TEXT = (
    "Quarterly revenue grew by twelve percent, driven by subscription renewals "
    "and a strong launch in the enterprise segment."
)


def _pdf_bytes(*pages: str) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for text in pages:
        if text:
            c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_path(tmp_path: Path) -> Path:
    """A single-page PDF with enough text to pass the weak-signal gate."""
    path = tmp_path / "report.pdf"
    path.write_bytes(_pdf_bytes(LONG_TEXT))
    return path


@pytest.fixture()
def multi_page_pdf_path(tmp_path: Path) -> Path:
    """A two-page PDF with known text on each page."""
    path = tmp_path / "pages.pdf"
    path.write_bytes(_pdf_bytes("Page one content", "Page two content"))
    return path


@pytest.fixture()
def empty_pdf_path(tmp_path: Path) -> Path:
    """A valid PDF with no text layer (blank page)."""
    path = tmp_path / "scan.pdf"
    path.write_bytes(_pdf_bytes(""))
    return path


@pytest.fixture()
def sample_docx_path(tmp_path: Path) -> Path:
    """A DOCX with one paragraph and a two-cell table."""
    document = docx.Document()
    document.add_paragraph(LONG_TEXT)
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Region"
    table.rows[0].cells[1].text = "EMEA"
    path = tmp_path / "notes.docx"
    document.save(str(path))
    return path


@pytest.fixture()
def write_file(tmp_path: Path):
    """Factory writing bytes or text to a file under tmp_path."""

    def _write(name: str, content: bytes | str) -> Path:
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)
        return path

    return _write
