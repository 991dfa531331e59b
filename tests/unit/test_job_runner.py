from collections.abc import Iterator
from pathlib import Path
from unittest.mock import ANY, MagicMock, patch

import pytest

from omnibrief.database.models import IngestJobRecord, SummaryRecord
from omnibrief.extraction.exceptions import WeakSignalError
from omnibrief.extraction.mime_types import FileType
from omnibrief.fetching.exceptions import FetchError
from omnibrief.fetching.models import FetchedFile
from omnibrief.processor.deadline import Deadline
from omnibrief.processor.models import MediaAsset, ProcessResult
from omnibrief.summarization.models import SummaryResult
from omnibrief.worker.job_runner import JobRunner

RESULT = ProcessResult(summary=SummaryResult(summary="S", key_points=["k"]), file_type=FileType.DOCUMENT)


@pytest.fixture(autouse=True)
def mock_conn() -> Iterator[MagicMock]:
    """Connection handed out by get_connection inside the job runner."""
    with patch("omnibrief.worker.job_runner.get_connection") as mock_get_conn:
        conn = MagicMock()
        mock_get_conn.return_value.__enter__ = MagicMock(return_value=conn)
        mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
        yield conn


class _Harness:
    def __init__(
        self, tmp_path: Path, max_attempts: int = 3, timeout_seconds: float = 300
    ) -> None:
        self.processor = MagicMock()
        self.processor.process.return_value = RESULT
        self.job_repo = MagicMock()
        self.summary_repo = MagicMock()
        self.fetcher = MagicMock()
        self.upload_dir = tmp_path / "uploads"
        self.upload_dir.mkdir()
        settings = MagicMock(
            max_job_attempts=max_attempts,
            pipeline_timeout_seconds=timeout_seconds,
            upload_dir=self.upload_dir,
        )
        self.runner = JobRunner(
            self.processor, self.job_repo, self.summary_repo, self.fetcher, settings
        )

    def upload_job(self, attempts: int = 0, content: bytes = b"hello") -> IngestJobRecord:
        (self.upload_dir / "doc.txt").write_bytes(content)
        return IngestJobRecord(
            id=1,
            user_id="user-1",
            source_kind="upload",
            source="doc.txt",
            file_name="notes.txt",
            mime_type="text/plain",
            file_size=len(content),
            status="processing",
            attempts=attempts,
        )

    def url_job(self, fetched_path: Path) -> IngestJobRecord:
        fetched_path.write_bytes(b"ID3")
        self.fetcher.fetch.return_value = FetchedFile(
            asset=MediaAsset(path=fetched_path, declared_mime_type="audio/mpeg", size_bytes=3),
            suggested_name="My Talk.mp3",
        )
        return IngestJobRecord(
            id=2,
            user_id="user-2",
            source_kind="url",
            source="https://youtu.be/abc",
            status="processing",
            attempts=0,
        )


class TestSuccessfulProcessing:
    def test_processes_upload_with_deadline(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)
        job = h.upload_job()

        h.runner.run(job)

        asset, deadline = h.processor.process.call_args.args
        assert asset == MediaAsset(
            path=h.upload_dir / "doc.txt", declared_mime_type="text/plain", size_bytes=5
        )
        assert 0 < deadline.remaining() <= 300

    def test_persists_exactly_one_record_and_marks_done(
        self, tmp_path: Path, mock_conn: MagicMock
    ) -> None:
        h = _Harness(tmp_path)

        h.runner.run(h.upload_job())

        h.summary_repo.append.assert_called_once()
        record = h.summary_repo.append.call_args.args[0]
        assert isinstance(record, SummaryRecord)
        assert record.user_id == "user-1"
        assert record.file_name == "notes.txt"
        assert record.processing_time_ms >= 0
        h.job_repo.mark_done.assert_called_once_with(1, record.id, conn=mock_conn)
        assert h.summary_repo.append.call_args.kwargs["conn"] is mock_conn
        mock_conn.commit.assert_called_once()

    def test_upload_deleted_after_success(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)

        h.runner.run(h.upload_job())

        assert not (h.upload_dir / "doc.txt").exists()

    def test_url_job_uses_fetcher_and_removes_download(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)
        fetched = tmp_path / "abc.mp3"

        h.runner.run(h.url_job(fetched))

        h.fetcher.fetch.assert_called_once_with("https://youtu.be/abc", deadline=ANY)
        assert isinstance(h.fetcher.fetch.call_args.kwargs["deadline"], Deadline)
        record = h.summary_repo.append.call_args.args[0]
        assert record.file_name == "My Talk.mp3"
        assert not fetched.exists()


class TestHardFailures:
    def test_processor_error_fails_immediately(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)
        h.processor.process.side_effect = WeakSignalError("no text layer")

        h.runner.run(h.upload_job(attempts=0))

        h.job_repo.mark_failed.assert_called_once_with(1, "no text layer")
        h.job_repo.increment_attempts.assert_not_called()
        h.summary_repo.append.assert_not_called()
        assert not (h.upload_dir / "doc.txt").exists()

    def test_fetch_error_fails_job(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)
        job = h.url_job(tmp_path / "x.mp3")
        h.fetcher.fetch.side_effect = FetchError("Failed to fetch URL: HTTP 404 Not Found")

        h.runner.run(job)

        h.job_repo.mark_failed.assert_called_once_with(2, "Failed to fetch URL: HTTP 404 Not Found")
        h.processor.process.assert_not_called()

    def test_missing_upload_fails_job(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)
        job = h.upload_job()
        (h.upload_dir / "doc.txt").unlink()

        h.runner.run(job)

        message = h.job_repo.mark_failed.call_args.args[1]
        assert "Uploaded file not found" in message

    def test_fetched_file_removed_on_failure(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path)
        fetched = tmp_path / "abc.mp3"
        job = h.url_job(fetched)
        h.processor.process.side_effect = Exception("boom")

        h.runner.run(job)

        assert not fetched.exists()

    def test_expired_after_fetch_fails_without_processing(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path, timeout_seconds=0)
        fetched = tmp_path / "abc.mp3"

        h.runner.run(h.url_job(fetched))

        message = h.job_repo.mark_failed.call_args.args[1]
        assert "timed out" in message
        h.processor.process.assert_not_called()
        assert not fetched.exists()


class TestRetries:
    def test_unexpected_error_below_max_is_retried(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path, max_attempts=3)
        h.processor.process.side_effect = Exception("db hiccup")

        h.runner.run(h.upload_job(attempts=0))

        h.job_repo.increment_attempts.assert_called_once_with(1)
        h.job_repo.mark_failed.assert_not_called()
        h.job_repo.mark_done.assert_not_called()
        assert (h.upload_dir / "doc.txt").exists()

    def test_unexpected_error_at_max_marks_failed(self, tmp_path: Path) -> None:
        h = _Harness(tmp_path, max_attempts=3)
        h.processor.process.side_effect = Exception("boom")

        h.runner.run(h.upload_job(attempts=2))

        h.job_repo.mark_failed.assert_called_once_with(1, "boom")
        h.job_repo.increment_attempts.assert_not_called()
        assert not (h.upload_dir / "doc.txt").exists()


class TestTransactionalCompletion:
    def test_failed_completion_commits_nothing_and_retry_persists_once(
        self, tmp_path: Path, mock_conn: MagicMock
    ) -> None:
        h = _Harness(tmp_path, max_attempts=3)
        h.job_repo.mark_done.side_effect = [RuntimeError("db blip"), None]

        h.runner.run(h.upload_job(attempts=0))

        mock_conn.commit.assert_not_called()
        h.job_repo.increment_attempts.assert_called_once_with(1)

        h.runner.run(h.upload_job(attempts=1))

        mock_conn.commit.assert_called_once()
        assert h.job_repo.mark_done.call_count == 2
        for call in h.summary_repo.append.call_args_list:
            assert call.kwargs["conn"] is mock_conn

    def test_summary_and_job_share_one_connection(
        self, tmp_path: Path, mock_conn: MagicMock
    ) -> None:
        h = _Harness(tmp_path)
        order: list[str] = []
        h.summary_repo.append.side_effect = lambda *a, **kw: order.append("append")
        h.job_repo.mark_done.side_effect = lambda *a, **kw: order.append("mark_done")
        mock_conn.commit.side_effect = lambda: order.append("commit")

        h.runner.run(h.upload_job())

        assert order == ["append", "mark_done", "commit"]
