"""SQLAlchemy models for the Record Store.

References between records are plain foreign-key columns. Nothing here keeps
an in-memory collection of dependents: counts and lists of dependents are
always read back through the store (see ``RecordStore.count_by`` and
``RecordStore.list_by``).
"""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

UNKNOWN_DEPARTMENT_CODE = "UNKNOWN"


class EnrollmentStatus(StrEnum):
    """Enrollment status enum."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
    FAILED = "FAILED"


class Role(StrEnum):
    """User account role."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


def generate_registration_number(
    department_code: str, student_id: int, year: int | None = None
) -> str:
    """Build a dossier registration number.

    Args:
        department_code: Code of the student's department
        student_id: Identity assigned to the student
        year: Registration year, defaults to the current year

    Returns:
        Registration number in "{code}-{year}-{id}" format, e.g. "GINF-2025-1"
    """
    if year is None:
        year = date.today().year
    return f"{department_code}-{year}-{student_id}"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """Creation and update timestamps shared by every record."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Department(TimestampMixin, Base):
    """Department (filiere) model - an academic track owning students and courses."""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __init__(
        self,
        code: str,
        name: str,
        description: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.code = code
        self.name = name
        self.description = description

    def __repr__(self) -> str:
        return f"<Department(id={self.id!r}, code={self.code!r}, name={self.name!r})>"


class User(TimestampMixin, Base):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __init__(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: str,
        enabled: bool = True,
        first_name: str | None = None,
        last_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.username = username
        self.email = email
        self.password_hash = password_hash
        self.role = role
        self.enabled = enabled
        self.first_name = first_name
        self.last_name = last_name

    @property
    def user_role(self) -> Role:
        """Get role as Role enum."""
        return Role(self.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, username={self.username!r}, role={self.role!r})>"


class Teacher(TimestampMixin, Base):
    """Teacher model."""

    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    specialization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    department_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("departments.id"), nullable=True, index=True
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, unique=True
    )

    def __init__(
        self,
        employee_number: str,
        first_name: str,
        last_name: str,
        email: str,
        phone: str | None = None,
        specialization: str | None = None,
        hire_date: date | None = None,
        department_id: int | None = None,
        user_id: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.employee_number = employee_number
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.phone = phone
        self.specialization = specialization
        self.hire_date = hire_date
        self.department_id = department_id
        self.user_id = user_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return (
            f"<Teacher(id={self.id!r}, employee_number={self.employee_number!r}, "
            f"email={self.email!r})>"
        )


class Student(TimestampMixin, Base):
    """Student model. Always attached to exactly one department."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    department_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("departments.id"), nullable=False, index=True
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, unique=True
    )

    def __init__(
        self,
        first_name: str,
        last_name: str,
        email: str,
        department_id: int,
        enrollment_date: date,
        phone: str | None = None,
        date_of_birth: date | None = None,
        user_id: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.department_id = department_id
        self.enrollment_date = enrollment_date
        self.phone = phone
        self.date_of_birth = date_of_birth
        self.user_id = user_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, email={self.email!r}, department_id={self.department_id!r})>"


class Course(TimestampMixin, Base):
    """Course model. Always attached to exactly one department."""

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("credits > 0", name="ck_courses_credits_positive"),
        CheckConstraint("max_students > 0", name="ck_courses_max_students_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    department_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("departments.id"), nullable=False, index=True
    )
    teacher_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("teachers.id"), nullable=True, index=True
    )

    def __init__(
        self,
        code: str,
        name: str,
        department_id: int,
        description: str | None = None,
        credits: int = 3,
        max_students: int = 30,
        teacher_id: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.code = code
        self.name = name
        self.department_id = department_id
        self.description = description
        self.credits = credits
        self.max_students = max_students
        self.teacher_id = teacher_id

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, code={self.code!r}, max_students={self.max_students!r})>"


class Enrollment(TimestampMixin, Base):
    """Enrollment model - join record between a student and a course."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        CheckConstraint(
            "grade IS NULL OR (grade >= 0 AND grade <= 20)",
            name="ck_enrollments_grade_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False, index=True
    )
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __init__(
        self,
        student_id: int,
        course_id: int,
        enrollment_date: date,
        status: str | None = None,
        grade: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.student_id = student_id
        self.course_id = course_id
        self.enrollment_date = enrollment_date
        self.status = status if status is not None else EnrollmentStatus.ACTIVE.value
        self.grade = grade

    @property
    def enrollment_status(self) -> EnrollmentStatus:
        """Get status as EnrollmentStatus enum."""
        return EnrollmentStatus(self.status)

    @enrollment_status.setter
    def enrollment_status(self, value: EnrollmentStatus) -> None:
        """Set status from EnrollmentStatus enum."""
        self.status = value.value

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, status={self.status!r})>"
        )


class DossierAdministratif(TimestampMixin, Base):
    """Administrative record issued to each student, owned by the student."""

    __tablename__ = "dossiers_administratifs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    registration_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    creation_date: Mapped[date] = mapped_column(Date, nullable=False)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, unique=True
    )

    def __init__(
        self,
        student_id: int,
        registration_number: str,
        creation_date: date,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.student_id = student_id
        self.registration_number = registration_number
        self.creation_date = creation_date

    def __repr__(self) -> str:
        return (
            f"<DossierAdministratif(id={self.id!r}, "
            f"registration_number={self.registration_number!r}, student_id={self.student_id!r})>"
        )
