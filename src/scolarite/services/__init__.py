"""Lifecycle services - the business rules of departments, people, courses and enrollments."""

from scolarite.services.courses import CourseService
from scolarite.services.departments import DepartmentService
from scolarite.services.enrollments import EnrollmentService
from scolarite.services.exceptions import (
    BusinessRuleError,
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ScolariteError,
    ValidationError,
)
from scolarite.services.students import StudentService
from scolarite.services.teachers import TeacherService
from scolarite.services.users import UserService

__all__ = [
    "BusinessRuleError",
    "ConflictError",
    "ConsistencyError",
    "CourseService",
    "DepartmentService",
    "EnrollmentService",
    "NotFoundError",
    "ScolariteError",
    "StudentService",
    "TeacherService",
    "UserService",
    "ValidationError",
]
