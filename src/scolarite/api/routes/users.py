"""User account endpoints."""

from fastapi import APIRouter, status

from scolarite.api.dependencies import UserServiceDep
from scolarite.api.models import (
    APIResponse,
    StudentResponse,
    TeacherResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
    student_to_response,
    teacher_to_response,
    user_to_response,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=APIResponse[list[UserResponse]])
def list_users(service: UserServiceDep) -> APIResponse[list[UserResponse]]:
    """List all user accounts."""
    return APIResponse(data=[user_to_response(u) for u in service.list_all()])


@router.post(
    "",
    response_model=APIResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_user(user: UserCreate, service: UserServiceDep) -> APIResponse[UserResponse]:
    """Create a user account."""
    created = service.create(**user.model_dump())
    return APIResponse(data=user_to_response(created))


@router.get("/{user_id}", response_model=APIResponse[UserResponse])
def get_user(user_id: int, service: UserServiceDep) -> APIResponse[UserResponse]:
    """Get a user account by ID."""
    return APIResponse(data=user_to_response(service.get(user_id)))


@router.put("/{user_id}", response_model=APIResponse[UserResponse])
def update_user(
    user_id: int, user: UserUpdate, service: UserServiceDep
) -> APIResponse[UserResponse]:
    """Replace a user account's fields."""
    updated = service.update(user_id, **user.model_dump())
    return APIResponse(data=user_to_response(updated))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, service: UserServiceDep) -> None:
    """Delete a user account."""
    service.delete(user_id)


@router.post("/{user_id}/link/student/{student_id}", response_model=APIResponse[StudentResponse])
def link_student(
    user_id: int, student_id: int, service: UserServiceDep
) -> APIResponse[StudentResponse]:
    """Attach a STUDENT account to a student record."""
    return APIResponse(data=student_to_response(service.link_student(user_id, student_id)))


@router.post("/{user_id}/link/teacher/{teacher_id}", response_model=APIResponse[TeacherResponse])
def link_teacher(
    user_id: int, teacher_id: int, service: UserServiceDep
) -> APIResponse[TeacherResponse]:
    """Attach a TEACHER account to a teacher record."""
    return APIResponse(data=teacher_to_response(service.link_teacher(user_id, teacher_id)))
