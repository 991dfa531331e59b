import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from omnibrief.extraction.mime_types import FileType
from omnibrief.processor.models import ProcessResult
from omnibrief.summarization.models import SummaryResult

SOURCE_UPLOAD = "upload"
SOURCE_URL = "url"


@dataclass
class IngestJobRecord:
    """Represents a row from the ingest_jobs table."""

    id: int
    user_id: str
    source_kind: str
    source: str
    status: str
    attempts: int
    file_name: str = ""
    mime_type: str | None = None
    file_size: int | None = None
    error_message: str | None = None
    summary_id: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_url(self) -> bool:
        return self.source_kind == SOURCE_URL


@dataclass(frozen=True)
class SummaryRecord:
    """Represents a row from the summaries table: one successful pipeline run."""

    id: str
    user_id: str
    file_name: str
    file_type: FileType
    file_size: int
    result: SummaryResult
    processing_time_ms: int
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_process_result(
        cls,
        *,
        user_id: str,
        file_name: str,
        file_size: int,
        result: ProcessResult,
        processing_time_ms: int,
    ) -> "SummaryRecord":
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            file_name=file_name,
            file_type=result.file_type,
            file_size=file_size,
            result=result.summary,
            processing_time_ms=processing_time_ms,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "fileName": self.file_name,
            "fileType": self.file_type.value,
            "fileSize": self.file_size,
            "createdAt": self.created_at.isoformat(),
            "processingTime": self.processing_time_ms,
            **self.result.to_dict(),
        }
