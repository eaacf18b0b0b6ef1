"""Teacher CRUD endpoints."""

from fastapi import APIRouter, Query, status

from scolarite.api.dependencies import CourseServiceDep, TeacherServiceDep
from scolarite.api.models import (
    APIResponse,
    CourseResponse,
    TeacherCreate,
    TeacherResponse,
    TeacherUpdate,
    course_to_response,
    teacher_to_response,
)

router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.get("", response_model=APIResponse[list[TeacherResponse]])
def list_teachers(
    service: TeacherServiceDep,
    department_id: int | None = Query(default=None, description="Filter by department ID"),
) -> APIResponse[list[TeacherResponse]]:
    """List teachers, optionally filtered by department."""
    teachers = service.list_all(department_id=department_id)
    return APIResponse(data=[teacher_to_response(t) for t in teachers])


@router.post(
    "",
    response_model=APIResponse[TeacherResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_teacher(
    teacher: TeacherCreate, service: TeacherServiceDep
) -> APIResponse[TeacherResponse]:
    """Create a new teacher."""
    created = service.create(**teacher.model_dump())
    return APIResponse(data=teacher_to_response(created))


@router.get("/{teacher_id}", response_model=APIResponse[TeacherResponse])
def get_teacher(teacher_id: int, service: TeacherServiceDep) -> APIResponse[TeacherResponse]:
    """Get a teacher by ID."""
    return APIResponse(data=teacher_to_response(service.get(teacher_id)))


@router.get("/{teacher_id}/courses", response_model=APIResponse[list[CourseResponse]])
def list_teacher_courses(
    teacher_id: int, courses: CourseServiceDep
) -> APIResponse[list[CourseResponse]]:
    """List the courses assigned to a teacher."""
    return APIResponse(data=[course_to_response(c) for c in courses.list_for_teacher(teacher_id)])


@router.put("/{teacher_id}", response_model=APIResponse[TeacherResponse])
def update_teacher(
    teacher_id: int, teacher: TeacherUpdate, service: TeacherServiceDep
) -> APIResponse[TeacherResponse]:
    """Replace a teacher's fields."""
    updated = service.update(teacher_id, **teacher.model_dump())
    return APIResponse(data=teacher_to_response(updated))


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_teacher(teacher_id: int, service: TeacherServiceDep) -> None:
    """Delete a teacher without assigned courses."""
    service.delete(teacher_id)
