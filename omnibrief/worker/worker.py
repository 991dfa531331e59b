import time

from omnibrief.config.settings import Settings
from omnibrief.database.connection import get_connection
from omnibrief.database.models import IngestJobRecord
from omnibrief.database.repositories.job_repository import JobRepository
from omnibrief.logging.logger import Log
from omnibrief.worker.job_runner import JobRunner


class Worker:
    """Poll loop over ingest_jobs: claim -> run -> repeat, sleeping when idle."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> int:
        """Poll until interrupted, or until ``max_jobs`` jobs have run.

        Returns the number of jobs dispatched.
        """
        Log.info(
            "Worker started, polling for ingest jobs",
            poll_interval_seconds=self._settings.job_poll_interval_seconds,
        )
        jobs_done = 0
        try:
            while max_jobs is None or jobs_done < max_jobs:
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No ingest jobs available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
                    continue
                self._job_runner.run(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully", jobs_done=jobs_done)
        return jobs_done

    def _try_claim_job(self) -> IngestJobRecord | None:
        """Attempt to claim the next pending job. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning("Database error while claiming job, will retry", error=str(exc))
            return None
