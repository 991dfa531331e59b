import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from omnibrief.config.settings import Settings
from omnibrief.database.connection import close_pool, get_connection, init_pool
from omnibrief.database.models import IngestJobRecord, SummaryRecord
from omnibrief.extraction.mime_types import FileType
from omnibrief.processor.models import ProcessResult
from omnibrief.summarization.models import Chapter, SummaryResult

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "omnibrief" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "omnibrief_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        # Fail fast instead of waiting on the pool's background connection retries.
        with psycopg.connect(
            f"host={test_settings.db_host} port={test_settings.db_port} "
            f"dbname={test_settings.db_database} user={test_settings.db_username} "
            f"password={test_settings.db_password}",
            connect_timeout=3,
        ) as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
        init_pool(test_settings)
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, object]], None, None]:
    cleanup: list[tuple[str, object]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "ingest_jobs":
                    cur.execute("DELETE FROM ingest_jobs WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "summaries":
                    cur.execute("DELETE FROM summaries WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_job(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, object]],
) -> IngestJobRecord:
    with db_conn.cursor(row_factory=dict_row) as cur:
        cur.execute(
            """
            INSERT INTO ingest_jobs (user_id, source_kind, source, file_name, mime_type, file_size)
            VALUES ('it-user', 'upload', 'it-notes.txt', 'notes.txt', 'text/plain', 120)
            RETURNING id, user_id, source_kind, source, file_name, mime_type,
                      file_size, status, attempts
            """
        )
        row = cur.fetchone()
        assert row is not None
    db_conn.commit()
    integration_cleanup.append(("ingest_jobs", row["id"]))
    return IngestJobRecord(**row)


@pytest.fixture
def make_summary_record() -> Callable[[str, str], SummaryRecord]:
    def _make(user_id: str, summary: str) -> SummaryRecord:
        return SummaryRecord.from_process_result(
            user_id=user_id,
            file_name="talk.mp3",
            file_size=1024,
            result=ProcessResult(
                summary=SummaryResult(
                    summary=summary,
                    key_points=["k"],
                    chapters=[Chapter(time="0:00", title="Intro")],
                ),
                file_type=FileType.AUDIO,
            ),
            processing_time_ms=900,
        )

    return _make
