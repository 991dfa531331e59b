from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TextContent:
    """Plain text extracted from a document."""

    content: str


@dataclass(frozen=True)
class PreparedAudio:
    """Audio file within the provider's inline-payload ceiling."""

    path: Path
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class RawImage:
    """Whole image file, base64-encoded for inline submission."""

    base64: str
    mime_type: str


ExtractionOutcome = TextContent | PreparedAudio | RawImage
