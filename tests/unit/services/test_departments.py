"""Unit tests for DepartmentService."""

import pytest

from scolarite.records import Department
from scolarite.services import (
    ConflictError,
    CourseService,
    DepartmentService,
    NotFoundError,
    StudentService,
    TeacherService,
    ValidationError,
)


@pytest.mark.unit
class TestCreateDepartment:
    def test_create_minimal(self, departments: DepartmentService) -> None:
        department = departments.create(code="GINF", name="Genie Informatique")

        assert department.id is not None
        assert department.code == "GINF"
        assert department.name == "Genie Informatique"
        assert department.description is None

    def test_code_is_stripped_and_upper_cased(self, departments: DepartmentService) -> None:
        department = departments.create(code="  ginf ", name="Genie Informatique")
        assert department.code == "GINF"

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_blank_code_rejected(self, departments: DepartmentService, code: str | None) -> None:
        with pytest.raises(ValidationError, match="Department code is required"):
            departments.create(code=code, name="Genie Informatique")

    @pytest.mark.parametrize("code", ["G INF", "G-INF", "G_INF"])
    def test_non_alphanumeric_code_rejected(
        self, departments: DepartmentService, code: str
    ) -> None:
        with pytest.raises(ValidationError, match="alphanumeric"):
            departments.create(code=code, name="Genie Informatique")

    def test_blank_name_rejected(self, departments: DepartmentService) -> None:
        with pytest.raises(ValidationError, match="Department name is required"):
            departments.create(code="GINF", name="  ")

    def test_duplicate_code_rejected(
        self, departments: DepartmentService, ginf: Department
    ) -> None:
        with pytest.raises(ConflictError, match="GINF"):
            departments.create(code="GINF", name="Autre")

    def test_duplicate_code_is_case_insensitive(
        self, departments: DepartmentService, ginf: Department
    ) -> None:
        with pytest.raises(ConflictError):
            departments.create(code="ginf", name="Autre")

    def test_duplicate_name_rejected(
        self, departments: DepartmentService, ginf: Department
    ) -> None:
        with pytest.raises(ConflictError, match="Genie Informatique"):
            departments.create(code="INFO", name="Genie Informatique")


@pytest.mark.unit
class TestReadDepartment:
    def test_get(self, departments: DepartmentService, ginf: Department) -> None:
        assert departments.get(ginf.id).code == "GINF"

    def test_get_missing(self, departments: DepartmentService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            departments.get(404)
        assert exc_info.value.entity == "Department"
        assert exc_info.value.value == 404

    def test_get_by_code_any_case(self, departments: DepartmentService, ginf: Department) -> None:
        assert departments.get_by_code("ginf").id == ginf.id

    def test_list_ordered_by_name(
        self, departments: DepartmentService, ginf: Department, gc: Department
    ) -> None:
        assert [d.code for d in departments.list_all()] == ["GC", "GINF"]


@pytest.mark.unit
class TestUpdateDepartment:
    def test_update_fields(self, departments: DepartmentService, ginf: Department) -> None:
        updated = departments.update(
            ginf.id, code="info", name="Informatique", description="Nouveau nom"
        )

        assert updated.code == "INFO"
        assert updated.name == "Informatique"
        assert updated.description == "Nouveau nom"

    def test_update_keeping_own_code(
        self, departments: DepartmentService, ginf: Department
    ) -> None:
        updated = departments.update(ginf.id, code="GINF", name="Genie Info")
        assert updated.name == "Genie Info"

    def test_update_to_other_code_rejected(
        self, departments: DepartmentService, ginf: Department, gc: Department
    ) -> None:
        with pytest.raises(ConflictError):
            departments.update(ginf.id, code="GC", name="Genie Informatique")

    def test_update_to_other_name_rejected(
        self, departments: DepartmentService, ginf: Department, gc: Department
    ) -> None:
        with pytest.raises(ConflictError):
            departments.update(ginf.id, code="GINF", name="Genie Civil")

    def test_update_missing(self, departments: DepartmentService) -> None:
        with pytest.raises(NotFoundError):
            departments.update(404, code="GINF", name="Genie Informatique")


@pytest.mark.unit
class TestDeleteDepartment:
    def test_delete_empty_department(
        self, departments: DepartmentService, ginf: Department
    ) -> None:
        departments.delete(ginf.id)

        with pytest.raises(NotFoundError):
            departments.get(ginf.id)

    def test_delete_missing(self, departments: DepartmentService) -> None:
        with pytest.raises(NotFoundError):
            departments.delete(404)

    def test_blocked_by_students(
        self, departments: DepartmentService, students: StudentService, ginf: Department
    ) -> None:
        students.create("Amina", "Benali", "amina@example.com", ginf.id)
        students.create("Youssef", "Alaoui", "youssef@example.com", ginf.id)

        with pytest.raises(ConflictError, match="has 2 student"):
            departments.delete(ginf.id)
        assert departments.get(ginf.id) is not None

    def test_blocked_by_courses(
        self, departments: DepartmentService, courses: CourseService, ginf: Department
    ) -> None:
        courses.create("INF101", "Algorithmique", ginf.id)

        with pytest.raises(ConflictError, match="has 1 course"):
            departments.delete(ginf.id)

    def test_blocked_by_teachers(
        self, departments: DepartmentService, teachers: TeacherService, ginf: Department
    ) -> None:
        teachers.create("EMP001", "Karim", "Idrissi", "karim@example.com", department_id=ginf.id)

        with pytest.raises(ConflictError, match="has 1 teacher"):
            departments.delete(ginf.id)

    def test_live_counts(
        self,
        departments: DepartmentService,
        students: StudentService,
        courses: CourseService,
        ginf: Department,
    ) -> None:
        students.create("Amina", "Benali", "amina@example.com", ginf.id)
        courses.create("INF101", "Algorithmique", ginf.id)

        assert departments.student_count(ginf.id) == 1
        assert departments.course_count(ginf.id) == 1
        assert departments.teacher_count(ginf.id) == 0
