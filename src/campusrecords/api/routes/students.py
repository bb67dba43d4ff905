"""Student endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from campusrecords.api.dependencies import RecordsDep
from campusrecords.api.models import (
    APIResponse,
    EnrollmentResponse,
    GradeResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    enrollment_to_response,
    grade_to_response,
    student_to_response,
)
from campusrecords.store.models import StudentStatus, new_student

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=APIResponse[list[StudentResponse]])
def list_students(
    records: RecordsDep,
    student_status: Annotated[StudentStatus | None, Query(alias="status")] = None,
    name: str | None = None,
    email: str | None = None,
    min_gpa: float | None = None,
    max_gpa: float | None = None,
) -> APIResponse[list[StudentResponse]]:
    """List students, optionally filtered.

    With no filters the list is sorted by name; with filters it is the
    advanced search, sorted by GPA (highest first).
    """
    if all(f is None for f in (student_status, name, email, min_gpa, max_gpa)):
        students = records.students.get_all()
    else:
        students = records.students.advanced_search(
            name=name, email=email, status=student_status, min_gpa=min_gpa, max_gpa=max_gpa
        )
    return APIResponse(data=[student_to_response(s) for s in students])


@router.get("/statistics", response_model=APIResponse[dict[StudentStatus, int]])
def student_statistics(records: RecordsDep) -> APIResponse[dict[StudentStatus, int]]:
    """Count of students per status."""
    return APIResponse(data=records.students.statistics())


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student(student: StudentCreate, records: RecordsDep) -> APIResponse[StudentResponse]:
    """Add a new student."""
    created = records.students.add(
        new_student(
            student_id=student.id,
            reg_no=student.reg_no,
            full_name=student.full_name,
            email=student.email,
            status=student.status,
            enrollment_date=student.enrollment_date,
        )
    )
    return APIResponse(data=student_to_response(created))


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
def get_student(student_id: str, records: RecordsDep) -> APIResponse[StudentResponse]:
    """Get a student by ID."""
    return APIResponse(data=student_to_response(records.students.require(student_id)))


@router.patch("/{student_id}", response_model=APIResponse[StudentResponse])
def update_student(
    student_id: str, student: StudentUpdate, records: RecordsDep
) -> APIResponse[StudentResponse]:
    """Update a student (partial update)."""
    updated = records.students.update(student_id, **student.model_dump(exclude_unset=True))
    return APIResponse(data=student_to_response(updated))


@router.post("/{student_id}/deactivate", response_model=APIResponse[StudentResponse])
def deactivate_student(student_id: str, records: RecordsDep) -> APIResponse[StudentResponse]:
    """Set a student's status to inactive."""
    return APIResponse(data=student_to_response(records.students.deactivate(student_id)))


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: str, records: RecordsDep) -> None:
    """Delete a student."""
    records.students.delete(student_id)


@router.get("/{student_id}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_student_enrollments(
    student_id: str, records: RecordsDep
) -> APIResponse[list[EnrollmentResponse]]:
    """List a student's enrollments."""
    enrollments = records.enrollments.get_student_enrollments(student_id)
    return APIResponse(data=[enrollment_to_response(e) for e in enrollments])


@router.get("/{student_id}/grades", response_model=APIResponse[list[GradeResponse]])
def list_student_grades(student_id: str, records: RecordsDep) -> APIResponse[list[GradeResponse]]:
    """List a student's grades."""
    grades = records.grades.get_student_grades(student_id)
    return APIResponse(data=[grade_to_response(g) for g in grades])
