from pathlib import Path

import pdfplumber

from omnibrief.extraction.base import BaseTextExtractor
from omnibrief.extraction.exceptions import PdfExtractionError


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts the PDF text layer using pdfplumber."""

    def extract(self, path: Path) -> str:
        try:
            with pdfplumber.open(path) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return "\n".join(pages).strip()
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
