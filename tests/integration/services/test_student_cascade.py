"""Integration tests for the student delete cascade."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from scolarite.records import Database, DossierAdministratif, Enrollment, RecordStore, Student, User
from scolarite.services import (
    ConsistencyError,
    CourseService,
    DepartmentService,
    EnrollmentService,
    StudentService,
    UserService,
)


@pytest.fixture
def database():
    """File-backed database, removed afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db = Database(str(Path(tmpdir) / "cascade.db"))
        db.create_tables()
        yield db
        db.close()


@pytest.fixture
def enrolled_student(database: Database) -> Student:
    """A student linked to a user account and enrolled in two courses."""
    department = DepartmentService(database).create("GINF", "Genie Informatique")
    courses = CourseService(database)
    enrollments = EnrollmentService(database)
    student = StudentService(database).create(
        "Amina", "Benali", "amina@example.com", department.id
    )
    user = UserService(database).create("amina", "amina@example.com", "Secret123!", "STUDENT")
    UserService(database).link_student(user.id, student.id)

    for code in ("INF101", "INF102"):
        course = courses.create(code, f"Cours {code}", department.id)
        enrollments.enroll(student.id, course.id)
    return student


def counts(database: Database, student_id: int) -> tuple[int, int, int]:
    with database.transaction() as store:
        return (
            store.count_by(Student, id=student_id),
            store.count_by(DossierAdministratif, student_id=student_id),
            store.count_by(Enrollment, student_id=student_id),
        )


@pytest.mark.integration
class TestStudentCascade:
    def test_delete_removes_everything_owned(
        self, database: Database, enrolled_student: Student
    ) -> None:
        StudentService(database).delete(enrolled_student.id)

        assert counts(database, enrolled_student.id) == (0, 0, 0)

    def test_linked_user_survives(self, database: Database, enrolled_student: Student) -> None:
        StudentService(database).delete(enrolled_student.id)

        with database.transaction() as store:
            user = store.get_by(User, username="amina")
            assert user is not None
        # The account is free again and can be removed
        UserService(database).delete(user.id)

    def test_failed_verification_rolls_back(
        self, database: Database, enrolled_student: Student
    ) -> None:
        with (
            patch.object(RecordStore, "exists", return_value=True),
            pytest.raises(ConsistencyError, match="still exists"),
        ):
            StudentService(database).delete(enrolled_student.id)

        assert counts(database, enrolled_student.id) == (1, 1, 2)
        with database.transaction() as store:
            assert store.get(Student, enrolled_student.id).user_id is not None

    def test_department_delete_allowed_after_cascade(
        self, database: Database, enrolled_student: Student
    ) -> None:
        departments = DepartmentService(database)
        courses = CourseService(database)
        StudentService(database).delete(enrolled_student.id)

        for course in courses.list_all():
            courses.delete(course.id)
        departments.delete(enrolled_student.department_id)

        assert departments.list_all() == []
