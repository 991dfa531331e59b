from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from omnibrief.database.connection import get_connection
from omnibrief.database.models import SummaryRecord
from omnibrief.extraction.mime_types import FileType
from omnibrief.summarization.models import Chapter, Speaker, SummaryResult

_COLUMNS = """
    id, user_id, file_name, file_type, file_size, summary, key_points,
    chapters, speakers, processing_time_ms, created_at
"""


class SummaryRepository:
    """Database operations for the summaries table.

    Every read and delete is scoped to the owning user, so an id guessed by
    another user never matches.
    """

    def append(
        self, record: SummaryRecord, conn: psycopg.Connection[Any] | None = None
    ) -> None:
        """Insert a new summary record.

        With ``conn`` the insert joins the caller's transaction and the caller
        commits; otherwise it runs and commits on its own pooled connection.
        """
        if conn is not None:
            self._insert(conn, record)
            return
        with get_connection() as own_conn:
            self._insert(own_conn, record)
            own_conn.commit()

    @staticmethod
    def _insert(conn: psycopg.Connection[Any], record: SummaryRecord) -> None:
        result = record.result
        conn.execute(
            """
            INSERT INTO summaries (
                id, user_id, file_name, file_type, file_size, summary,
                key_points, chapters, speakers, processing_time_ms, created_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                record.id,
                record.user_id,
                record.file_name,
                record.file_type.value,
                record.file_size,
                result.summary,
                Jsonb(list(result.key_points)),
                Jsonb([
                    {"time": c.time, "title": c.title, "description": c.description}
                    for c in result.chapters
                ]),
                Jsonb([{"name": s.name, "traits": s.traits} for s in result.speakers]),
                record.processing_time_ms,
                record.created_at,
            ),
        )

    def list_for_owner(self, user_id: str) -> list[SummaryRecord]:
        """Return the user's summaries, newest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM summaries
                    WHERE user_id = %s
                    ORDER BY created_at DESC
                    """,
                    (user_id,),
                )
                rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def find_for_owner(self, summary_id: str, user_id: str) -> SummaryRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM summaries
                    WHERE id = %s AND user_id = %s
                    """,
                    (summary_id, user_id),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return self._to_record(row)

    def delete_for_owner(self, summary_id: str, user_id: str) -> bool:
        """Delete a summary owned by ``user_id``. Returns False if none matched."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM summaries WHERE id = %s AND user_id = %s",
                    (summary_id, user_id),
                )
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    @staticmethod
    def _to_record(row: dict[str, Any]) -> SummaryRecord:
        return SummaryRecord(
            id=str(row["id"]),
            user_id=row["user_id"],
            file_name=row["file_name"],
            file_type=FileType(row["file_type"]),
            file_size=row["file_size"],
            result=SummaryResult(
                summary=row["summary"],
                key_points=list(row["key_points"] or []),
                chapters=[Chapter(**c) for c in row["chapters"] or []],
                speakers=[Speaker(**s) for s in row["speakers"] or []],
            ),
            processing_time_ms=row["processing_time_ms"],
            created_at=row["created_at"],
        )
