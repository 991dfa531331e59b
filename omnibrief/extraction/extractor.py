"""Content extraction for documents and images."""

import base64
from pathlib import Path

from omnibrief.extraction.base import BaseTextExtractor
from omnibrief.extraction.docx_adapter import DocxAdapter
from omnibrief.extraction.exceptions import (
    ExtractionError,
    PdfExtractionError,
    WeakSignalError,
)
from omnibrief.extraction.html_adapter import HtmlAdapter
from omnibrief.extraction.mime_types import (
    DOCX_MIME_TYPE,
    FileType,
    classify_media_type,
    normalize_mime_type,
)
from omnibrief.extraction.models import ExtractionOutcome, RawImage, TextContent
from omnibrief.extraction.plain_text_adapter import PlainTextAdapter
from omnibrief.logging.logger import Log

MIN_TEXT_LENGTH = 50

WEAK_SIGNAL_MESSAGE = (
    "Weak signal: this document appears to be empty or an image-only scan "
    "with no text layer, so there is nothing to summarize. "
    "Solution: take screenshots of the pages and upload them as images "
    "(.jpg/.png) so they can be analyzed by the vision model."
)

_HTML_TYPES = frozenset({"text/html", "application/xhtml+xml"})


class ContentExtractor:
    """Turns a document or image file into an ExtractionOutcome.

    Audio and video are not handled here: the pipeline routes them to the
    media normalizer.
    """

    def __init__(
        self,
        pdf_extractor: BaseTextExtractor,
        docx_extractor: BaseTextExtractor | None = None,
        html_extractor: BaseTextExtractor | None = None,
        text_extractor: BaseTextExtractor | None = None,
        fallback_extractor: BaseTextExtractor | None = None,
    ) -> None:
        self._pdf = pdf_extractor
        self._docx = docx_extractor or DocxAdapter()
        self._html = html_extractor or HtmlAdapter()
        self._text = text_extractor or PlainTextAdapter()
        self._fallback = fallback_extractor or PlainTextAdapter(strict=True)

    def extract(self, path: Path, declared_mime_type: str) -> ExtractionOutcome:
        """Extract content from ``path`` according to its declared MIME type.

        Raises:
            ExtractionError: if the file is unreadable, corrupt or not a
                document/image.
            WeakSignalError: if a document yields under MIN_TEXT_LENGTH chars.
        """
        mime = normalize_mime_type(declared_mime_type)
        file_type = classify_media_type(mime)

        if file_type is FileType.IMAGE:
            return self._read_image(path, mime)
        if file_type is FileType.DOCUMENT:
            return TextContent(content=self._extract_document_text(path, mime))
        raise ExtractionError(f"Cannot extract content from media type '{declared_mime_type}'")

    def _read_image(self, path: Path, mime: str) -> RawImage:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ExtractionError(f"Failed to read image: {exc}") from exc
        if not data:
            raise ExtractionError("Image file is empty")
        Log.info("Image loaded for vision analysis", mime_type=mime, size_bytes=len(data))
        return RawImage(base64=base64.b64encode(data).decode("ascii"), mime_type=mime)

    def _extract_document_text(self, path: Path, mime: str) -> str:
        Log.info("Text extraction started", mime_type=mime)
        if not path.is_file():
            raise ExtractionError(f"File not found: {path.name}")

        if mime == "application/pdf":
            try:
                text = self._pdf.extract(path)
            except PdfExtractionError as exc:
                # Unparseable text layer is reported the same way as a scan.
                Log.warning("PDF text layer unreadable", error=str(exc))
                text = ""
        else:
            extractor = self._select_extractor(mime)
            try:
                text = extractor.extract(path)
            except ExtractionError as exc:
                if extractor is self._fallback:
                    raise ExtractionError(f"Unsupported document type: {mime}") from exc
                raise

        length = len(text.strip())
        Log.info("Text extraction finished", mime_type=mime, chars=length)
        if length < MIN_TEXT_LENGTH:
            raise WeakSignalError(WEAK_SIGNAL_MESSAGE)
        return text

    def _select_extractor(self, mime: str) -> BaseTextExtractor:
        if mime == DOCX_MIME_TYPE:
            return self._docx
        if mime in _HTML_TYPES:
            return self._html
        if mime.startswith("text/") or "json" in mime or "xml" in mime:
            return self._text
        return self._fallback
