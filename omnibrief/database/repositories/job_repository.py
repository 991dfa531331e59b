from typing import Any

import psycopg
from psycopg.rows import dict_row

from omnibrief.database.connection import get_connection
from omnibrief.database.models import IngestJobRecord


class JobRepository:
    """Database operations for the ingest_jobs table."""

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> IngestJobRecord | None:
        """Claim the next pending job using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, user_id, source_kind, source, file_name, mime_type,
                       file_size, status, attempts
                FROM ingest_jobs
                WHERE status = 'pending'
                  AND attempts < %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()

        if row is None:
            return None

        conn.execute(
            """
            UPDATE ingest_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        return IngestJobRecord(
            id=row["id"],
            user_id=row["user_id"],
            source_kind=row["source_kind"],
            source=row["source"],
            file_name=row["file_name"],
            mime_type=row["mime_type"],
            file_size=row["file_size"],
            status="processing",
            attempts=row["attempts"],
        )

    def mark_done(
        self, job_id: int, summary_id: str, conn: psycopg.Connection[Any] | None = None
    ) -> None:
        """Mark a job as done and link the summary it produced.

        With ``conn`` the update joins the caller's transaction and the caller
        commits.
        """
        if conn is not None:
            self._set_done(conn, job_id, summary_id)
            return
        with get_connection() as own_conn:
            self._set_done(own_conn, job_id, summary_id)
            own_conn.commit()

    @staticmethod
    def _set_done(conn: psycopg.Connection[Any], job_id: int, summary_id: str) -> None:
        conn.execute(
            """
            UPDATE ingest_jobs
            SET status = 'done', summary_id = %s, error_message = NULL,
                updated_at = NOW()
            WHERE id = %s
            """,
            (summary_id, job_id),
        )

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a job as permanently failed."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE ingest_jobs
                SET status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def increment_attempts(self, job_id: int) -> None:
        """Increment attempt count and return job to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE ingest_jobs
                SET attempts = attempts + 1, status = 'pending',
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> IngestJobRecord | None:
        """Find a job by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, user_id, source_kind, source, file_name, mime_type,
                           file_size, status, attempts, error_message, summary_id,
                           locked_at, created_at, updated_at
                    FROM ingest_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return IngestJobRecord(
            id=row["id"],
            user_id=row["user_id"],
            source_kind=row["source_kind"],
            source=row["source"],
            file_name=row["file_name"],
            mime_type=row["mime_type"],
            file_size=row["file_size"],
            status=row["status"],
            attempts=row["attempts"],
            error_message=row["error_message"],
            summary_id=str(row["summary_id"]) if row["summary_id"] is not None else None,
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
