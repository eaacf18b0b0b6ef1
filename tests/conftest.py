"""Shared pytest fixtures and configuration."""

from collections.abc import Iterator

import pytest

from scolarite.records import Database, Department
from scolarite.services import (
    CourseService,
    DepartmentService,
    EnrollmentService,
    StudentService,
    TeacherService,
    UserService,
)


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def db() -> Iterator[Database]:
    """Create an in-memory database with all tables."""
    database = Database(":memory:")
    database.create_tables()
    yield database
    database.close()


@pytest.fixture
def departments(db: Database) -> DepartmentService:
    return DepartmentService(db)


@pytest.fixture
def teachers(db: Database) -> TeacherService:
    return TeacherService(db)


@pytest.fixture
def courses(db: Database) -> CourseService:
    return CourseService(db)


@pytest.fixture
def students(db: Database) -> StudentService:
    return StudentService(db)


@pytest.fixture
def enrollments(db: Database) -> EnrollmentService:
    return EnrollmentService(db)


@pytest.fixture
def users(db: Database) -> UserService:
    return UserService(db)


@pytest.fixture
def ginf(departments: DepartmentService) -> Department:
    """Computer engineering department."""
    return departments.create(code="GINF", name="Genie Informatique")


@pytest.fixture
def gc(departments: DepartmentService) -> Department:
    """Civil engineering department."""
    return departments.create(code="GC", name="Genie Civil")
