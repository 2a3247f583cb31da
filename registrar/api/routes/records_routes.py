"""Administrative record routes -- grade updates and transcripts.

Both endpoints require an instructor access token. Database errors are
returned with the database's own message text.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from registrar.infrastructure.audit import try_log_event
from registrar.infrastructure.auth.dependencies import require_instructor

router = APIRouter(prefix="/api", tags=["records"])

_records = None


def init_records_routes(records_repo):
    global _records
    _records = records_repo


class GradeUpdateRequest(BaseModel):
    student_id: int = Field(..., alias="studentId")
    course_id: int = Field(..., alias="courseId")
    grade: str = Field(..., min_length=1, max_length=5)


@router.post("/update-grade")
def api_update_grade(req: GradeUpdateRequest, instructor: dict = Depends(require_instructor)):
    _records.update_grade(req.student_id, req.course_id, req.grade)
    try_log_event("grade_updated", instructor["sub"], {
        "student_id": req.student_id,
        "course_id": req.course_id,
        "grade": req.grade,
    })
    return {"success": True, "message": "Grade updated successfully"}


@router.get("/student/{student_id}/transcript")
def api_generate_transcript(student_id: int, instructor: dict = Depends(require_instructor)):
    lines = _records.generate_transcript(student_id)
    try_log_event("transcript_generated", instructor["sub"], {
        "student_id": student_id,
        "lines": len(lines),
    })
    return {
        "success": True,
        "message": "Transcript generated",
        "transcript": lines,
    }
