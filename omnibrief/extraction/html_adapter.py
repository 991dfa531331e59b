from pathlib import Path

from bs4 import BeautifulSoup

from omnibrief.extraction.base import BaseTextExtractor
from omnibrief.extraction.exceptions import ExtractionError


class HtmlAdapter(BaseTextExtractor):
    """Converts an HTML page to readable text."""

    _DROPPED_TAGS = ("script", "style", "noscript", "template")

    def extract(self, path: Path) -> str:
        try:
            html = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ExtractionError(f"Failed to extract text from HTML: {exc}") from exc

        soup = BeautifulSoup(html, "html.parser")
        for element in soup(self._DROPPED_TAGS):
            element.decompose()
        return soup.get_text(separator="\n", strip=True)
