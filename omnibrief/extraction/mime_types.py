"""MIME type normalization and media-family dispatch."""

from enum import Enum

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DEFAULT_MIME_TYPE = "application/octet-stream"


class FileType(str, Enum):
    DOCUMENT = "document"
    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"


def normalize_mime_type(mime_type: str | None) -> str:
    """Lower-case a MIME type and drop parameters such as ``charset``."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def classify_media_type(mime_type: str | None) -> FileType | None:
    """Return the media family for a MIME type, or None when unsupported.

    Every type maps to at most one family. Media prefixes are checked before
    the document rules so that e.g. ``video/x-ms-asx+xml`` is still a video.
    """
    mime = normalize_mime_type(mime_type)
    if mime.startswith("image/"):
        return FileType.IMAGE
    if mime.startswith("audio/"):
        return FileType.AUDIO
    if mime.startswith("video/"):
        return FileType.VIDEO
    if (
        mime.startswith("text/")
        or mime.startswith("application/")
        or "json" in mime
        or "xml" in mime
    ):
        return FileType.DOCUMENT
    return None
