from pathlib import Path

import docx

from omnibrief.extraction.base import BaseTextExtractor
from omnibrief.extraction.exceptions import ExtractionError


class DocxAdapter(BaseTextExtractor):
    """Extracts raw text from DOCX paragraphs and table cells."""

    def extract(self, path: Path) -> str:
        try:
            document = docx.Document(str(path))
        except Exception as exc:
            raise ExtractionError(f"Failed to extract text from DOCX: {exc}") from exc

        parts = [para.text for para in document.paragraphs if para.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append("\t".join(cells))
        return "\n".join(parts).strip()
