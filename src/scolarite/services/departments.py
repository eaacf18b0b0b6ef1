"""Department lifecycle: uniqueness and deletion-safety rules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scolarite.records import Course, Department, DuplicateRecordError, Student, Teacher
from scolarite.services.exceptions import ConflictError, NotFoundError, ValidationError
from scolarite.services.validation import is_valid_department_code, optional, require

if TYPE_CHECKING:
    from scolarite.records import Database, RecordStore

logger = logging.getLogger(__name__)


def get_department(store: RecordStore, department_id: int) -> Department:
    """Resolve a department inside an open unit of work.

    Raises:
        NotFoundError: If the department doesn't exist
    """
    department = store.get(Department, department_id)
    if department is None:
        raise NotFoundError("Department", "id", department_id)
    return department


def normalize_department_code(code: str | None) -> str:
    """Validate a department code and return its canonical upper-case form.

    Raises:
        ValidationError: If the code is blank or not strictly alphanumeric
    """
    code = require(code, "Department code")
    if not is_valid_department_code(code):
        raise ValidationError(
            f"Department code '{code}' must be alphanumeric only (A-Z, 0-9); "
            "spaces, dashes and underscores are not allowed"
        )
    return code.upper()


class DepartmentService:
    """Create, update and delete departments.

    A department can only be deleted once nothing references it: no student,
    no course and no teacher.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Reads ---

    def get(self, department_id: int) -> Department:
        """Get department by ID.

        Raises:
            NotFoundError: If department doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return get_department(store, department_id)

    def get_by_code(self, code: str) -> Department:
        """Get department by code (case-insensitive).

        Raises:
            NotFoundError: If no department has this code
        """
        with self._db.transaction(readonly=True) as store:
            department = store.get_by(Department, code=code.strip().upper())
            if department is None:
                raise NotFoundError("Department", "code", code)
            return department

    def list_all(self) -> list[Department]:
        """List all departments, ordered by name."""
        with self._db.transaction(readonly=True) as store:
            return store.list_all(Department, order_by=Department.name)

    def student_count(self, department_id: int) -> int:
        """Live count of students attached to the department."""
        with self._db.transaction(readonly=True) as store:
            get_department(store, department_id)
            return store.count_by(Student, department_id=department_id)

    def course_count(self, department_id: int) -> int:
        """Live count of courses offered by the department."""
        with self._db.transaction(readonly=True) as store:
            get_department(store, department_id)
            return store.count_by(Course, department_id=department_id)

    def teacher_count(self, department_id: int) -> int:
        """Live count of teachers attached to the department."""
        with self._db.transaction(readonly=True) as store:
            get_department(store, department_id)
            return store.count_by(Teacher, department_id=department_id)

    # --- Writes ---

    def create(self, code: str, name: str, description: str | None = None) -> Department:
        """Create a new department.

        Args:
            code: Short alphanumeric code (stored upper-case, e.g. "GINF")
            name: Display name, unique across departments
            description: Free text (optional)

        Returns:
            Created Department with generated ID

        Raises:
            ValidationError: If code or name is blank, or code isn't alphanumeric
            ConflictError: If code or name is already used
        """
        code = normalize_department_code(code)
        name = require(name, "Department name")

        with self._db.transaction() as store:
            if store.exists_by(Department, code=code):
                raise ConflictError(f"Department code '{code}' already exists")
            if store.exists_by(Department, name=name):
                raise ConflictError(f"Department with name '{name}' already exists")

            try:
                department = store.save(
                    Department(code=code, name=name, description=optional(description))
                )
            except DuplicateRecordError as e:
                raise ConflictError(f"Department '{code}' already exists") from e

            logger.info("Created department %s (id=%s)", department.code, department.id)
            return department

    def update(
        self,
        department_id: int,
        code: str,
        name: str,
        description: str | None = None,
    ) -> Department:
        """Replace a department's fields.

        Returns:
            The updated Department

        Raises:
            NotFoundError: If department doesn't exist
            ValidationError: If code or name is blank, or code isn't alphanumeric
            ConflictError: If code or name belongs to another department
        """
        code = normalize_department_code(code)
        name = require(name, "Department name")

        with self._db.transaction() as store:
            department = get_department(store, department_id)

            same_code = store.get_by(Department, code=code)
            if same_code is not None and same_code.id != department_id:
                raise ConflictError(f"Department code '{code}' is already used")
            same_name = store.get_by(Department, name=name)
            if same_name is not None and same_name.id != department_id:
                raise ConflictError(f"Department with name '{name}' already exists")

            department.code = code
            department.name = name
            department.description = optional(description)
            try:
                department = store.save(department)
            except DuplicateRecordError as e:
                raise ConflictError(f"Department '{code}' already exists") from e

            logger.info("Updated department %s (id=%s)", department.code, department_id)
            return department

    def delete(self, department_id: int) -> None:
        """Delete a department that nothing references any more.

        Raises:
            NotFoundError: If department doesn't exist
            ConflictError: If any student, course or teacher still references it
        """
        with self._db.transaction() as store:
            department = get_department(store, department_id)

            blockers = [
                (Student, "student(s)"),
                (Course, "course(s)"),
                (Teacher, "teacher(s)"),
            ]
            for model, label in blockers:
                count = store.count_by(model, department_id=department_id)
                if count > 0:
                    logger.warning(
                        "Refused to delete department %s: %d %s", department.code, count, label
                    )
                    raise ConflictError(
                        f"Cannot delete department '{department.name}': has {count} {label}"
                    )

            store.delete(department)
            logger.info("Deleted department %s (id=%s)", department.code, department_id)
