"""Grade endpoints."""

from fastapi import APIRouter, status

from campusrecords.api.dependencies import RecordsDep
from campusrecords.api.models import (
    APIResponse,
    GradeCreate,
    GradeResponse,
    GradeStatsResponse,
    GradeUpdate,
    grade_to_response,
)
from campusrecords.store.exceptions import NotFoundError

router = APIRouter(prefix="/grades", tags=["grades"])


@router.get("", response_model=APIResponse[list[GradeResponse]])
def list_grades(records: RecordsDep) -> APIResponse[list[GradeResponse]]:
    """List all grades."""
    return APIResponse(data=[grade_to_response(g) for g in records.grades.get_all()])


@router.get("/statistics", response_model=APIResponse[GradeStatsResponse])
def grade_statistics(records: RecordsDep) -> APIResponse[GradeStatsResponse]:
    """Totals, average marks, distribution and pass rate."""
    return APIResponse(data=GradeStatsResponse.model_validate(records.grades.statistics()))


@router.post(
    "",
    response_model=APIResponse[GradeResponse],
    status_code=status.HTTP_201_CREATED,
)
def record_grade(request: GradeCreate, records: RecordsDep) -> APIResponse[GradeResponse]:
    """Record a grade for an enrolled student."""
    grade = records.grades.record_grade(
        request.student_id, request.course_code, request.marks, comments=request.comments
    )
    return APIResponse(data=grade_to_response(grade))


@router.get("/{student_id}/{course_code}", response_model=APIResponse[GradeResponse])
def get_grade(student_id: str, course_code: str, records: RecordsDep) -> APIResponse[GradeResponse]:
    """Get one grade."""
    grade = records.grades.get_grade(student_id, course_code)
    if grade is None:
        raise NotFoundError("Grade", f"{student_id}/{course_code}")
    return APIResponse(data=grade_to_response(grade))


@router.patch("/{student_id}/{course_code}", response_model=APIResponse[GradeResponse])
def update_grade(
    student_id: str,
    course_code: str,
    request: GradeUpdate,
    records: RecordsDep,
) -> APIResponse[GradeResponse]:
    """Change a grade's marks."""
    grade = records.grades.update_grade(
        student_id, course_code, request.marks, comments=request.comments
    )
    return APIResponse(data=grade_to_response(grade))


@router.delete("/{student_id}/{course_code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_grade(student_id: str, course_code: str, records: RecordsDep) -> None:
    """Delete a grade."""
    records.grades.delete_grade(student_id, course_code)
