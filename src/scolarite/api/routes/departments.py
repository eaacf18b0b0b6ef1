"""Department CRUD endpoints."""

from fastapi import APIRouter, status

from scolarite.api.dependencies import DepartmentServiceDep
from scolarite.api.models import (
    APIResponse,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentStatsResponse,
    department_to_response,
)

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("", response_model=APIResponse[list[DepartmentResponse]])
def list_departments(service: DepartmentServiceDep) -> APIResponse[list[DepartmentResponse]]:
    """List all departments."""
    departments = service.list_all()
    return APIResponse(data=[department_to_response(d) for d in departments])


@router.post(
    "",
    response_model=APIResponse[DepartmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_department(
    department: DepartmentCreate, service: DepartmentServiceDep
) -> APIResponse[DepartmentResponse]:
    """Create a new department."""
    created = service.create(
        code=department.code,
        name=department.name,
        description=department.description,
    )
    return APIResponse(data=department_to_response(created))


@router.get("/by-code/{code}", response_model=APIResponse[DepartmentResponse])
def get_department_by_code(
    code: str, service: DepartmentServiceDep
) -> APIResponse[DepartmentResponse]:
    """Get a department by its code."""
    return APIResponse(data=department_to_response(service.get_by_code(code)))


@router.get("/{department_id}", response_model=APIResponse[DepartmentResponse])
def get_department(
    department_id: int, service: DepartmentServiceDep
) -> APIResponse[DepartmentResponse]:
    """Get a department by ID."""
    return APIResponse(data=department_to_response(service.get(department_id)))


@router.get("/{department_id}/stats", response_model=APIResponse[DepartmentStatsResponse])
def get_department_stats(
    department_id: int, service: DepartmentServiceDep
) -> APIResponse[DepartmentStatsResponse]:
    """Live counts of the students, courses and teachers attached to a department."""
    return APIResponse(
        data=DepartmentStatsResponse(
            department_id=department_id,
            student_count=service.student_count(department_id),
            course_count=service.course_count(department_id),
            teacher_count=service.teacher_count(department_id),
        )
    )


@router.put("/{department_id}", response_model=APIResponse[DepartmentResponse])
def update_department(
    department_id: int, department: DepartmentCreate, service: DepartmentServiceDep
) -> APIResponse[DepartmentResponse]:
    """Replace a department's fields."""
    updated = service.update(
        department_id,
        code=department.code,
        name=department.name,
        description=department.description,
    )
    return APIResponse(data=department_to_response(updated))


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(department_id: int, service: DepartmentServiceDep) -> None:
    """Delete a department nothing references any more."""
    service.delete(department_id)
