"""Course endpoints."""

from fastapi import APIRouter, status

from campusrecords.api.dependencies import RecordsDep
from campusrecords.api.models import (
    APIResponse,
    CourseCreate,
    CourseGradeSummary,
    CourseResponse,
    CourseUpdate,
    DepartmentStatsResponse,
    EnrollmentResponse,
    GradeResponse,
    InstructorAssignment,
    course_to_response,
    enrollment_to_response,
    grade_to_response,
)
from campusrecords.store.models import Semester, new_course

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    records: RecordsDep,
    department: str | None = None,
    semester: Semester | None = None,
    instructor: str | None = None,
    active_only: bool = False,
) -> APIResponse[list[CourseResponse]]:
    """List courses, optionally filtered by department, semester or instructor."""
    if department is not None:
        courses = records.courses.get_by_department(department)
    elif semester is not None:
        courses = records.courses.get_by_semester(semester)
    elif instructor is not None:
        courses = records.courses.get_by_instructor(instructor)
    else:
        courses = records.courses.get_all()
    if active_only:
        courses = [c for c in courses if c.is_active]
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.get("/departments", response_model=APIResponse[list[DepartmentStatsResponse]])
def department_statistics(records: RecordsDep) -> APIResponse[list[DepartmentStatsResponse]]:
    """Course totals per department."""
    stats = records.courses.department_statistics().values()
    return APIResponse(data=[DepartmentStatsResponse.model_validate(s) for s in stats])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, records: RecordsDep) -> APIResponse[CourseResponse]:
    """Add a new course."""
    created = records.courses.add(
        new_course(
            code=course.code,
            title=course.title,
            credits=course.credits,
            department=course.department,
            semester=course.semester,
            instructor=course.instructor,
            description=course.description,
            is_active=course.is_active,
        )
    )
    return APIResponse(data=course_to_response(created))


@router.get("/{code}", response_model=APIResponse[CourseResponse])
def get_course(code: str, records: RecordsDep) -> APIResponse[CourseResponse]:
    """Get a course by code."""
    return APIResponse(data=course_to_response(records.courses.require(code)))


@router.patch("/{code}", response_model=APIResponse[CourseResponse])
def update_course(
    code: str, course: CourseUpdate, records: RecordsDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    updated = records.courses.update(code, **course.model_dump(exclude_unset=True))
    return APIResponse(data=course_to_response(updated))


@router.put("/{code}/instructor", response_model=APIResponse[CourseResponse])
def assign_instructor(
    code: str, assignment: InstructorAssignment, records: RecordsDep
) -> APIResponse[CourseResponse]:
    """Assign an instructor to a course."""
    course = records.courses.assign_instructor(code, assignment.instructor)
    return APIResponse(data=course_to_response(course))


@router.post("/{code}/deactivate", response_model=APIResponse[CourseResponse])
def deactivate_course(code: str, records: RecordsDep) -> APIResponse[CourseResponse]:
    """Mark a course inactive."""
    return APIResponse(data=course_to_response(records.courses.deactivate(code)))


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(code: str, records: RecordsDep) -> None:
    """Delete a course."""
    records.courses.delete(code)


@router.get("/{code}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_course_enrollments(
    code: str, records: RecordsDep
) -> APIResponse[list[EnrollmentResponse]]:
    """List a course's enrollments."""
    enrollments = records.enrollments.get_course_enrollments(code)
    return APIResponse(data=[enrollment_to_response(e) for e in enrollments])


@router.get("/{code}/grades", response_model=APIResponse[list[GradeResponse]])
def list_course_grades(code: str, records: RecordsDep) -> APIResponse[list[GradeResponse]]:
    """List a course's grades."""
    grades = records.grades.get_course_grades(code)
    return APIResponse(data=[grade_to_response(g) for g in grades])


@router.get("/{code}/grade-summary", response_model=APIResponse[CourseGradeSummary])
def course_grade_summary(code: str, records: RecordsDep) -> APIResponse[CourseGradeSummary]:
    """Average marks and letter distribution for a course."""
    return APIResponse(
        data=CourseGradeSummary(
            course_code=code,
            average_marks=records.grades.calculate_course_average(code),
            distribution=records.grades.course_grade_distribution(code),
        )
    )
