"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends

from scolarite.records import Database
from scolarite.services import (
    CourseService,
    DepartmentService,
    EnrollmentService,
    StudentService,
    TeacherService,
    UserService,
)


@dataclass
class Services:
    """The lifecycle services, all bound to one Database."""

    departments: DepartmentService
    teachers: TeacherService
    courses: CourseService
    students: StudentService
    enrollments: EnrollmentService
    users: UserService

    @classmethod
    def for_database(cls, db: Database) -> Services:
        return cls(
            departments=DepartmentService(db),
            teachers=TeacherService(db),
            courses=CourseService(db),
            students=StudentService(db),
            enrollments=EnrollmentService(db),
            users=UserService(db),
        )


# Global Database and services (initialized on app startup)
_database: Database | None = None
_services: Services | None = None


def init_services(db_path: str = "scolarite.db") -> Services:
    """Open the database, create missing tables and build the global services."""
    global _database, _services  # noqa: PLW0603
    _database = Database(db_path)
    _database.create_tables()
    _services = Services.for_database(_database)
    return _services


def close_services() -> None:
    """Drop the global services and close the database."""
    global _database, _services  # noqa: PLW0603
    if _database is not None:
        _database.close()
    _database = None
    _services = None


def get_services() -> Generator[Services, None, None]:
    """Dependency that provides the services."""
    if _services is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    yield _services


def get_department_service(
    services: Annotated[Services, Depends(get_services)],
) -> DepartmentService:
    return services.departments


def get_teacher_service(services: Annotated[Services, Depends(get_services)]) -> TeacherService:
    return services.teachers


def get_course_service(services: Annotated[Services, Depends(get_services)]) -> CourseService:
    return services.courses


def get_student_service(services: Annotated[Services, Depends(get_services)]) -> StudentService:
    return services.students


def get_enrollment_service(
    services: Annotated[Services, Depends(get_services)],
) -> EnrollmentService:
    return services.enrollments


def get_user_service(services: Annotated[Services, Depends(get_services)]) -> UserService:
    return services.users


# Type aliases for dependency injection
ServicesDep = Annotated[Services, Depends(get_services)]
DepartmentServiceDep = Annotated[DepartmentService, Depends(get_department_service)]
TeacherServiceDep = Annotated[TeacherService, Depends(get_teacher_service)]
CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]
StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
