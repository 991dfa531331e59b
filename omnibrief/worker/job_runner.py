import time
from pathlib import Path

from omnibrief.config.settings import Settings
from omnibrief.database.connection import get_connection
from omnibrief.database.models import IngestJobRecord, SummaryRecord
from omnibrief.database.repositories.job_repository import JobRepository
from omnibrief.database.repositories.summary_repository import SummaryRepository
from omnibrief.extraction.mime_types import DEFAULT_MIME_TYPE
from omnibrief.fetching.fetcher import RemoteFetcher
from omnibrief.logging.logger import Log
from omnibrief.processor.deadline import Deadline
from omnibrief.processor.exceptions import InputNotFoundError, ProcessorError
from omnibrief.processor.models import MediaAsset
from omnibrief.processor.processor import Processor


class JobRunner:
    """Run one ingest job, persist its summary, and apply retry logic.

    Hard pipeline failures (ProcessorError) fail the job at once with the
    user-facing message. Anything else is retried until max_job_attempts.
    """

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        summary_repo: SummaryRepository,
        fetcher: RemoteFetcher,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._summary_repo = summary_repo
        self._fetcher = fetcher
        self._settings = settings

    def run(self, job: IngestJobRecord) -> None:
        """Execute a single job with error handling."""
        Log.info("Running job", job_id=job.id, source_kind=job.source_kind, attempt=job.attempts + 1)
        deadline = Deadline.after(self._settings.pipeline_timeout_seconds)
        started = time.monotonic()
        fetched: Path | None = None
        terminal = True
        try:
            if job.is_url:
                asset, file_name = self._fetch(job, deadline)
                fetched = asset.path
                deadline.check("processing")
            else:
                asset, file_name = self._upload_asset(job), job.file_name

            result = self._processor.process(asset, deadline)
            record = SummaryRecord.from_process_result(
                user_id=job.user_id,
                file_name=file_name or asset.path.name,
                file_size=asset.size_bytes,
                result=result,
                processing_time_ms=int((time.monotonic() - started) * 1000),
            )
            self._persist(job, record)
            Log.info(
                "Job completed successfully",
                job_id=job.id,
                summary_id=record.id,
                processing_time_ms=record.processing_time_ms,
            )
        except ProcessorError as exc:
            Log.error("Job rejected", job_id=job.id, error=str(exc))
            self._job_repo.mark_failed(job.id, str(exc))
        except Exception as exc:
            terminal = self._handle_failure(job, exc)
        finally:
            if fetched is not None:
                self._discard(fetched)

        if terminal and not job.is_url:
            self._discard(self._upload_path(job))

    def _persist(self, job: IngestJobRecord, record: SummaryRecord) -> None:
        """Store the summary and complete the job in a single transaction."""
        with get_connection() as conn:
            self._summary_repo.append(record, conn=conn)
            self._job_repo.mark_done(job.id, record.id, conn=conn)
            conn.commit()

    def _fetch(self, job: IngestJobRecord, deadline: Deadline) -> tuple[MediaAsset, str]:
        fetched = self._fetcher.fetch(job.source, deadline=deadline)
        return fetched.asset, job.file_name or fetched.suggested_name

    def _upload_asset(self, job: IngestJobRecord) -> MediaAsset:
        path = self._upload_path(job)
        try:
            size = path.stat().st_size
        except FileNotFoundError as exc:
            raise InputNotFoundError(f"Uploaded file not found: {job.file_name or path.name}") from exc
        return MediaAsset(
            path=path,
            declared_mime_type=job.mime_type or DEFAULT_MIME_TYPE,
            size_bytes=job.file_size if job.file_size is not None else size,
        )

    def _upload_path(self, job: IngestJobRecord) -> Path:
        path = Path(job.source)
        return path if path.is_absolute() else self._settings.upload_dir / path

    def _handle_failure(self, job: IngestJobRecord, exc: Exception) -> bool:
        """Increment attempts; mark failed if at max. Returns True when terminal."""
        Log.error("Job failed", job_id=job.id, error=f"{type(exc).__name__}: {exc}")
        if job.attempts + 1 >= self._settings.max_job_attempts:
            self._job_repo.mark_failed(job.id, str(exc))
            Log.error("Job permanently failed", job_id=job.id, attempts=job.attempts + 1)
            return True
        self._job_repo.increment_attempts(job.id)
        Log.warning("Job will be retried", job_id=job.id, attempt=job.attempts + 1)
        return False

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
            Log.debug("Input file removed", path=path.name)
        except OSError as exc:
            Log.warning("Could not remove input file", path=str(path), error=str(exc))
