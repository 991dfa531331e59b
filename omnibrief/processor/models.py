from dataclasses import dataclass
from pathlib import Path
from typing import Any

from omnibrief.extraction.mime_types import FileType
from omnibrief.summarization.models import SummaryResult


@dataclass(frozen=True)
class MediaAsset:
    """A local file handed to the pipeline, with its declared type and size."""

    path: Path
    declared_mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class ProcessResult:
    """Pipeline output: the canonical summary tagged with its media family."""

    summary: SummaryResult
    file_type: FileType

    def to_dict(self) -> dict[str, Any]:
        return {**self.summary.to_dict(), "fileType": self.file_type.value}
