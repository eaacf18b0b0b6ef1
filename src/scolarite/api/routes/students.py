"""Student CRUD, dossier and per-student course endpoints."""

from fastapi import APIRouter, Query, status

from scolarite.api.dependencies import CourseServiceDep, EnrollmentServiceDep, StudentServiceDep
from scolarite.api.models import (
    APIResponse,
    CourseResponse,
    DossierResponse,
    EnrollmentResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    course_to_response,
    dossier_to_response,
    enrollment_to_response,
    student_to_response,
)

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=APIResponse[list[StudentResponse]])
def list_students(
    service: StudentServiceDep,
    department_id: int | None = Query(default=None, description="Filter by department ID"),
) -> APIResponse[list[StudentResponse]]:
    """List students, optionally filtered by department."""
    students = service.list_all(department_id=department_id)
    return APIResponse(data=[student_to_response(s) for s in students])


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    student: StudentCreate, service: StudentServiceDep
) -> APIResponse[StudentResponse]:
    """Create a student together with its administrative dossier."""
    created = service.create(**student.model_dump())
    return APIResponse(data=student_to_response(created))


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
def get_student(student_id: int, service: StudentServiceDep) -> APIResponse[StudentResponse]:
    """Get a student by ID."""
    return APIResponse(data=student_to_response(service.get(student_id)))


@router.get("/{student_id}/dossier", response_model=APIResponse[DossierResponse])
def get_student_dossier(
    student_id: int, service: StudentServiceDep
) -> APIResponse[DossierResponse]:
    """Get the administrative dossier of a student."""
    return APIResponse(data=dossier_to_response(service.get_dossier(student_id)))


@router.get("/{student_id}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_student_enrollments(
    student_id: int,
    service: StudentServiceDep,
    enrollments: EnrollmentServiceDep,
    active_only: bool = Query(default=False, description="Only ACTIVE enrollments"),
) -> APIResponse[list[EnrollmentResponse]]:
    """List the enrollments of a student."""
    service.get(student_id)
    if active_only:
        found = enrollments.list_active_for_student(student_id)
    else:
        found = enrollments.list_for_student(student_id)
    return APIResponse(data=[enrollment_to_response(e) for e in found])


@router.get("/{student_id}/courses", response_model=APIResponse[list[CourseResponse]])
def list_student_courses(
    student_id: int, courses: CourseServiceDep
) -> APIResponse[list[CourseResponse]]:
    """List the courses a student holds an enrollment in."""
    return APIResponse(
        data=[course_to_response(c) for c in courses.courses_for_student(student_id)]
    )


@router.get(
    "/{student_id}/available-courses", response_model=APIResponse[list[CourseResponse]]
)
def list_available_courses(
    student_id: int, courses: CourseServiceDep
) -> APIResponse[list[CourseResponse]]:
    """List the courses a student could enroll in right now."""
    return APIResponse(
        data=[course_to_response(c) for c in courses.available_courses_for_student(student_id)]
    )


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
def update_student(
    student_id: int, student: StudentUpdate, service: StudentServiceDep
) -> APIResponse[StudentResponse]:
    """Replace a student's fields."""
    updated = service.update(student_id, **student.model_dump())
    return APIResponse(data=student_to_response(updated))


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: int, service: StudentServiceDep) -> None:
    """Delete a student, its enrollments and its dossier."""
    service.delete(student_id)
