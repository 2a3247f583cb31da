"""Academic-record commands backed by stored procedures.

``update_student_grade`` validates and applies a grade change server-side.
``generate_student_transcript`` reports through ``RAISE NOTICE``; the
notices emitted during the call are collected and returned as lines.
"""
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from registrar.domain.errors import CommandError

logger = logging.getLogger("registrar.records")

UPDATE_GRADE = text("CALL update_student_grade(:student_id, :course_id, :grade)")
GENERATE_TRANSCRIPT = text("CALL generate_student_transcript(:student_id)")


class _NoticeCollector:
    """Stands in for psycopg2's ``connection.notices`` list without its 50-entry cap."""

    def __init__(self):
        self.messages: list[str] = []

    def append(self, message: str) -> None:
        self.messages.append(message)

    def lines(self) -> list[str]:
        out = []
        for message in self.messages:
            line = message.strip()
            if line.startswith("NOTICE:"):
                line = line[len("NOTICE:"):].strip()
            out.append(line)
        return out


def store_message(exc: SQLAlchemyError) -> str:
    """The database's own error text, without SQLAlchemy's statement dump."""
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    primary = getattr(diag, "message_primary", None)
    if primary:
        return primary
    if orig is not None:
        return str(orig).strip().splitlines()[0]
    return str(exc).splitlines()[0]


class PgRecordsRepository:
    """Grade updates and transcript generation."""

    def __init__(self, session_factory):
        self._sf = session_factory

    def update_grade(self, student_id: int, course_id: int, grade: str) -> None:
        params = {"student_id": student_id, "course_id": course_id, "grade": grade}
        try:
            with self._sf() as session:
                session.execute(UPDATE_GRADE, params)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Update grade failed for student %s course %s: %s", student_id, course_id, exc)
            raise CommandError(store_message(exc)) from exc

    def generate_transcript(self, student_id: int) -> list[str]:
        try:
            with self._sf() as session:
                dbapi_conn = session.connection().connection.dbapi_connection
                collector = _NoticeCollector()
                previous = getattr(dbapi_conn, "notices", None)
                dbapi_conn.notices = collector
                try:
                    session.execute(GENERATE_TRANSCRIPT, {"student_id": student_id})
                    session.commit()
                finally:
                    if previous is not None:
                        dbapi_conn.notices = previous
        except SQLAlchemyError as exc:
            logger.error("Transcript generation failed for student %s: %s", student_id, exc)
            raise CommandError(store_message(exc)) from exc

        lines = collector.lines()
        for line in lines:
            logger.info("transcript[%s] %s", student_id, line)
        return lines
