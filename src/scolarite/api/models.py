"""Pydantic models for REST API."""

from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Department models


class DepartmentCreate(BaseModel):
    """Request model for creating or replacing a department."""

    code: str = Field(..., max_length=20)
    name: str = Field(..., max_length=255)
    description: str | None = None


class DepartmentResponse(BaseModel):
    """Response model for a department."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime


class DepartmentStatsResponse(BaseModel):
    """Live counts of what references a department."""

    department_id: int
    student_count: int
    course_count: int
    teacher_count: int


def department_to_response(department: Any) -> DepartmentResponse:
    """Convert a Department model to DepartmentResponse."""
    return DepartmentResponse.model_validate(department)


# Teacher models


class TeacherCreate(BaseModel):
    """Request model for creating a teacher."""

    employee_number: str = Field(..., max_length=50)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    specialization: str | None = Field(default=None, max_length=255)
    hire_date: date | None = None
    department_id: int | None = None


class TeacherUpdate(BaseModel):
    """Request model for replacing a teacher. The employee number can't change."""

    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    specialization: str | None = Field(default=None, max_length=255)
    hire_date: date | None = None
    department_id: int | None = None


class TeacherResponse(BaseModel):
    """Response model for a teacher."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_number: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    specialization: str | None
    hire_date: date | None
    department_id: int | None
    user_id: int | None
    created_at: datetime
    updated_at: datetime


def teacher_to_response(teacher: Any) -> TeacherResponse:
    """Convert a Teacher model to TeacherResponse."""
    return TeacherResponse.model_validate(teacher)


# Student models


class StudentCreate(BaseModel):
    """Request model for creating a student."""

    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    department_id: int | None = None
    phone: str | None = Field(default=None, max_length=30)
    date_of_birth: date | None = None
    enrollment_date: date | None = None


class StudentUpdate(BaseModel):
    """Request model for replacing a student."""

    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    department_id: int | None = None
    phone: str | None = Field(default=None, max_length=30)
    date_of_birth: date | None = None


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None
    date_of_birth: date | None
    enrollment_date: date
    department_id: int
    user_id: int | None
    created_at: datetime
    updated_at: datetime


class DossierResponse(BaseModel):
    """Response model for an administrative dossier."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    registration_number: str
    creation_date: date
    student_id: int


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


def dossier_to_response(dossier: Any) -> DossierResponse:
    """Convert a DossierAdministratif model to DossierResponse."""
    return DossierResponse.model_validate(dossier)


# Course models


class CourseCreate(BaseModel):
    """Request model for creating or replacing a course.

    Omitted credits/max_students take the defaults on creation and keep the
    current values on update.
    """

    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=255)
    department_id: int | None = None
    description: str | None = None
    credits: int | None = None
    max_students: int | None = None
    teacher_id: int | None = None


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: str | None
    credits: int
    max_students: int
    department_id: int
    teacher_id: int | None
    created_at: datetime
    updated_at: datetime


class CapacityResponse(BaseModel):
    """Live capacity of a course."""

    course_id: int
    max_students: int
    enrolled: int
    is_full: bool


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


# Enrollment models


class EnrollmentCreate(BaseModel):
    student_id: int
    course_id: int


class GradeAssign(BaseModel):
    grade: float


class GradeCorrection(BaseModel):
    grade: float
    reason: str | None = None


class StatusOverride(BaseModel):
    status: str


class EnrollmentResponse(BaseModel):
    """Response model for an enrollment."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    enrollment_date: date
    status: str
    grade: float | None
    created_at: datetime
    updated_at: datetime


def enrollment_to_response(enrollment: Any) -> EnrollmentResponse:
    """Convert an Enrollment model to EnrollmentResponse."""
    return EnrollmentResponse.model_validate(enrollment)


# User models


class UserCreate(BaseModel):
    """Request model for creating a user account."""

    username: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    password: str
    role: str
    enabled: bool = True
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class UserUpdate(BaseModel):
    """Request model for replacing a user account.

    The password is only changed when one is given.
    """

    username: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    role: str
    enabled: bool | None = None
    password: str | None = None
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class UserResponse(BaseModel):
    """Response model for a user account. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    enabled: bool
    first_name: str | None
    last_name: str | None
    created_at: datetime
    updated_at: datetime



class LoginRequest(BaseModel):
    username: str
    password: str


def user_to_response(user: Any) -> UserResponse:
    """Convert a User model to UserResponse."""
    return UserResponse.model_validate(user)
