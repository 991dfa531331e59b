from omnibrief.config.settings import Settings
from omnibrief.database.connection import close_pool, init_pool
from omnibrief.database.repositories.job_repository import JobRepository
from omnibrief.database.repositories.summary_repository import SummaryRepository
from omnibrief.fetching.fetcher import RemoteFetcher
from omnibrief.logging.logger import Log
from omnibrief.processor.processor import build_processor
from omnibrief.worker.job_runner import JobRunner
from omnibrief.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    Log.info("Starting OmniBrief worker", env=settings.app_env, provider=settings.summarization_provider)
    init_pool(settings)

    fetcher = RemoteFetcher(
        settings.work_dir,
        timeout_seconds=settings.fetch_timeout_seconds,
        ffmpeg_binary=settings.ffmpeg_binary,
    )
    try:
        processor = build_processor(settings)
        job_repo = JobRepository(settings.max_job_attempts)
        job_runner = JobRunner(processor, job_repo, SummaryRepository(), fetcher, settings)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        fetcher.close()
        close_pool()


if __name__ == "__main__":
    main()
