from pathlib import Path

import pymupdf

from omnibrief.extraction.base import BaseTextExtractor
from omnibrief.extraction.exceptions import PdfExtractionError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts the PDF text layer using PyMuPDF."""

    def extract(self, path: Path) -> str:
        try:
            with pymupdf.open(path, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
