"""Dashboard read models for students and instructors."""
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from registrar.domain.errors import InternalError

logger = logging.getLogger("registrar.db")

_PRIVATE_COLUMNS = ("password_hash",)

STUDENT_PROFILE = text(
    """
    SELECT s.*, d.department_name
    FROM students s
    LEFT JOIN departments d ON s.department_id = d.department_id
    WHERE s.student_id = :student_id
    """
)

STUDENT_COURSES = text(
    """
    SELECT c.course_code, c.course_name, c.credits, e.grade, e.status,
           i.first_name || ' ' || i.last_name AS instructor_name
    FROM enrollments e
    JOIN courses c ON e.course_id = c.course_id
    LEFT JOIN instructors i ON c.instructor_id = i.instructor_id
    WHERE e.student_id = :student_id
    ORDER BY c.course_code
    """
)

# GPA is computed by the database, never in application code.
STUDENT_GPA = text("SELECT calculate_student_gpa(:student_id) AS gpa")

INSTRUCTOR_PROFILE = text(
    """
    SELECT i.*, d.department_name
    FROM instructors i
    LEFT JOIN departments d ON i.department_id = d.department_id
    WHERE i.instructor_id = :instructor_id
    """
)

INSTRUCTOR_COURSES = text(
    """
    SELECT c.*, COUNT(e.student_id) AS enrolled_students
    FROM courses c
    LEFT JOIN enrollments e ON c.course_id = e.course_id AND e.status = 'enrolled'
    WHERE c.instructor_id = :instructor_id
    GROUP BY c.course_id
    ORDER BY c.course_code
    """
)

INSTRUCTOR_STUDENTS = text(
    """
    SELECT * FROM instructor_course_students
    WHERE instructor_id = :instructor_id
    ORDER BY course_code, student_name
    """
)


def _public(row) -> dict:
    return {k: v for k, v in dict(row).items() if k not in _PRIVATE_COLUMNS}


class PgDashboardRepository:
    """Aggregates profile, course and summary data for the dashboards."""

    def __init__(self, session_factory):
        self._sf = session_factory

    def student_dashboard(self, student_id: int) -> Optional[dict]:
        """Profile + enrolled courses + GPA, or None if the student does not exist."""
        params = {"student_id": student_id}
        try:
            with self._sf() as session:
                profile = session.execute(STUDENT_PROFILE, params).mappings().first()
                if profile is None:
                    return None
                courses = session.execute(STUDENT_COURSES, params).mappings().all()
                gpa = session.execute(STUDENT_GPA, params).scalar()
        except SQLAlchemyError as exc:
            logger.error("Student dashboard query failed for %s: %s", student_id, exc)
            raise InternalError() from exc
        return {
            "student": _public(profile),
            "courses": [dict(c) for c in courses],
            "gpa": gpa,
        }

    def instructor_dashboard(self, instructor_id: int) -> Optional[dict]:
        """Profile + assigned courses + roster, or None if the instructor does not exist."""
        params = {"instructor_id": instructor_id}
        try:
            with self._sf() as session:
                profile = session.execute(INSTRUCTOR_PROFILE, params).mappings().first()
                if profile is None:
                    return None
                courses = session.execute(INSTRUCTOR_COURSES, params).mappings().all()
                students = session.execute(INSTRUCTOR_STUDENTS, params).mappings().all()
        except SQLAlchemyError as exc:
            logger.error("Instructor dashboard query failed for %s: %s", instructor_id, exc)
            raise InternalError() from exc
        return {
            "instructor": _public(profile),
            "courses": [dict(c) for c in courses],
            "students": [dict(s) for s in students],
        }
