from pathlib import Path

from omnibrief.extraction.base import BaseTextExtractor
from omnibrief.extraction.exceptions import ExtractionError


class PlainTextAdapter(BaseTextExtractor):
    """Reads a file as UTF-8 text.

    In strict mode undecodable bytes fail the extraction; otherwise they are
    replaced so that logs and exports with stray bytes still go through.
    """

    def __init__(self, strict: bool = False) -> None:
        self._errors = "strict" if strict else "replace"

    def extract(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors=self._errors)
        except UnicodeDecodeError as exc:
            raise ExtractionError(f"File is not readable as text: {exc.reason}") from exc
        except OSError as exc:
            raise ExtractionError(f"Failed to read text file: {exc}") from exc
