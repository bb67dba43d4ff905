"""Enrollment endpoints."""

from fastapi import APIRouter, status

from campusrecords.api.dependencies import RecordsDep
from campusrecords.api.models import (
    APIResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatsResponse,
    EnrollmentStatusUpdate,
    enrollment_to_response,
)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.get("", response_model=APIResponse[list[EnrollmentResponse]])
def list_enrollments(records: RecordsDep) -> APIResponse[list[EnrollmentResponse]]:
    """List all enrollments."""
    return APIResponse(data=[enrollment_to_response(e) for e in records.enrollments.get_all()])


@router.get("/statistics", response_model=APIResponse[EnrollmentStatsResponse])
def enrollment_statistics(records: RecordsDep) -> APIResponse[EnrollmentStatsResponse]:
    """Enrollment counts per status and per course."""
    stats = records.enrollments.statistics()
    return APIResponse(data=EnrollmentStatsResponse.model_validate(stats))


@router.post(
    "",
    response_model=APIResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def enroll(request: EnrollmentCreate, records: RecordsDep) -> APIResponse[EnrollmentResponse]:
    """Enroll a student in a course."""
    enrollment = records.enrollments.enroll(request.student_id, request.course_code)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.patch(
    "/{student_id}/{course_code}",
    response_model=APIResponse[EnrollmentResponse],
)
def update_enrollment_status(
    student_id: str,
    course_code: str,
    request: EnrollmentStatusUpdate,
    records: RecordsDep,
) -> APIResponse[EnrollmentResponse]:
    """Move an enrolled record to another status."""
    enrollment = records.enrollments.update_status(student_id, course_code, request.status)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.delete("/{student_id}/{course_code}", status_code=status.HTTP_204_NO_CONTENT)
def unenroll(student_id: str, course_code: str, records: RecordsDep) -> None:
    """Remove an enrollment."""
    records.enrollments.unenroll(student_id, course_code)
