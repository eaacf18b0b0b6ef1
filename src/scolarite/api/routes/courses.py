"""Course CRUD and capacity endpoints."""

from fastapi import APIRouter, Query, status

from scolarite.api.dependencies import CourseServiceDep, EnrollmentServiceDep
from scolarite.api.models import (
    APIResponse,
    CapacityResponse,
    CourseCreate,
    CourseResponse,
    EnrollmentResponse,
    course_to_response,
    enrollment_to_response,
)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    service: CourseServiceDep,
    department_id: int | None = Query(default=None, description="Filter by department ID"),
) -> APIResponse[list[CourseResponse]]:
    """List courses, optionally filtered by department."""
    courses = service.list_all(department_id=department_id)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, service: CourseServiceDep) -> APIResponse[CourseResponse]:
    """Create a new course."""
    created = service.create(**course.model_dump())
    return APIResponse(data=course_to_response(created))


@router.get("/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: int, service: CourseServiceDep) -> APIResponse[CourseResponse]:
    """Get a course by ID."""
    return APIResponse(data=course_to_response(service.get(course_id)))


@router.get("/{course_id}/capacity", response_model=APIResponse[CapacityResponse])
def get_course_capacity(
    course_id: int, service: CourseServiceDep
) -> APIResponse[CapacityResponse]:
    """Live enrollment count of a course against its capacity."""
    course = service.get(course_id)
    enrolled = service.current_enrollment_count(course_id)
    return APIResponse(
        data=CapacityResponse(
            course_id=course_id,
            max_students=course.max_students,
            enrolled=enrolled,
            is_full=enrolled >= course.max_students,
        )
    )


@router.get("/{course_id}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_course_enrollments(
    course_id: int, service: CourseServiceDep, enrollments: EnrollmentServiceDep
) -> APIResponse[list[EnrollmentResponse]]:
    """List every enrollment of a course."""
    service.get(course_id)
    return APIResponse(
        data=[enrollment_to_response(e) for e in enrollments.list_for_course(course_id)]
    )


@router.put("/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: int, course: CourseCreate, service: CourseServiceDep
) -> APIResponse[CourseResponse]:
    """Replace a course's fields."""
    updated = service.update(course_id, **course.model_dump())
    return APIResponse(data=course_to_response(updated))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, service: CourseServiceDep) -> None:
    """Delete a course without active or completed enrollments."""
    service.delete(course_id)
