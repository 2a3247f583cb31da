"""Dashboard routes for students and instructors."""
from fastapi import APIRouter

from registrar.domain.errors import NotFoundError

router = APIRouter(prefix="/api", tags=["dashboard"])

_dashboards = None


def init_dashboard_routes(dashboard_repo):
    global _dashboards
    _dashboards = dashboard_repo


@router.get("/student/{student_id}/dashboard")
def api_student_dashboard(student_id: int):
    """Student profile, enrolled courses and GPA."""
    data = _dashboards.student_dashboard(student_id)
    if data is None:
        raise NotFoundError("Student not found")
    return {"success": True, **data}


@router.get("/instructor/{instructor_id}/dashboard")
def api_instructor_dashboard(instructor_id: int):
    """Instructor profile, assigned courses with enrolment counts, and roster."""
    data = _dashboards.instructor_dashboard(instructor_id)
    if data is None:
        raise NotFoundError("Instructor not found")
    return {"success": True, **data}
