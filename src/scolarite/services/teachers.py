"""Teacher lifecycle: uniqueness rules and deletion protection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scolarite.records import Course, DuplicateRecordError, Teacher
from scolarite.services.departments import get_department
from scolarite.services.exceptions import ConflictError, NotFoundError
from scolarite.services.validation import check_email, check_phone, optional, require

if TYPE_CHECKING:
    from datetime import date

    from scolarite.records import Database, RecordStore

logger = logging.getLogger(__name__)


def get_teacher(store: RecordStore, teacher_id: int) -> Teacher:
    """Resolve a teacher inside an open unit of work.

    Raises:
        NotFoundError: If the teacher doesn't exist
    """
    teacher = store.get(Teacher, teacher_id)
    if teacher is None:
        raise NotFoundError("Teacher", "id", teacher_id)
    return teacher


class TeacherService:
    """Create, update and delete teachers.

    The employee number is fixed at creation. A teacher who still has courses
    assigned cannot be deleted.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self, teacher_id: int) -> Teacher:
        """Get teacher by ID.

        Raises:
            NotFoundError: If teacher doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return get_teacher(store, teacher_id)

    def get_by_user(self, user_id: int) -> Teacher:
        """Get the teacher linked to a user account.

        Raises:
            NotFoundError: If no teacher is linked to this user
        """
        with self._db.transaction(readonly=True) as store:
            teacher = store.get_by(Teacher, user_id=user_id)
            if teacher is None:
                raise NotFoundError("Teacher", "user_id", user_id)
            return teacher

    def list_all(self, department_id: int | None = None) -> list[Teacher]:
        """List teachers, optionally only those of one department."""
        with self._db.transaction(readonly=True) as store:
            if department_id is not None:
                return store.list_by(Teacher, department_id=department_id)
            return store.list_all(Teacher)

    def course_count(self, teacher_id: int) -> int:
        """Live count of courses assigned to the teacher."""
        with self._db.transaction(readonly=True) as store:
            get_teacher(store, teacher_id)
            return store.count_by(Course, teacher_id=teacher_id)

    def create(
        self,
        employee_number: str,
        first_name: str,
        last_name: str,
        email: str,
        phone: str | None = None,
        specialization: str | None = None,
        hire_date: date | None = None,
        department_id: int | None = None,
    ) -> Teacher:
        """Create a new teacher.

        Returns:
            Created Teacher with generated ID

        Raises:
            ValidationError: On blank required fields or bad email/phone format
            ConflictError: If employee number or email is already used
            NotFoundError: If department_id is given but doesn't exist
        """
        employee_number = require(employee_number, "Employee number")
        first_name = require(first_name, "First name")
        last_name = require(last_name, "Last name")
        email = check_email(email)
        phone = check_phone(phone)

        with self._db.transaction() as store:
            if store.exists_by(Teacher, employee_number=employee_number):
                raise ConflictError(f"Employee number '{employee_number}' already exists")
            if store.exists_by(Teacher, email=email):
                raise ConflictError(f"Email '{email}' is already used by another teacher")
            if department_id is not None:
                get_department(store, department_id)

            try:
                teacher = store.save(
                    Teacher(
                        employee_number=employee_number,
                        first_name=first_name,
                        last_name=last_name,
                        email=email,
                        phone=phone,
                        specialization=optional(specialization),
                        hire_date=hire_date,
                        department_id=department_id,
                    )
                )
            except DuplicateRecordError as e:
                raise ConflictError(f"Teacher '{employee_number}' already exists") from e

            logger.info("Created teacher %s (id=%s)", teacher.employee_number, teacher.id)
            return teacher

    def update(
        self,
        teacher_id: int,
        first_name: str,
        last_name: str,
        email: str,
        phone: str | None = None,
        specialization: str | None = None,
        hire_date: date | None = None,
        department_id: int | None = None,
    ) -> Teacher:
        """Replace a teacher's fields. The employee number never changes.

        Raises:
            NotFoundError: If teacher or department doesn't exist
            ValidationError: On blank required fields or bad email/phone format
            ConflictError: If email belongs to another teacher
        """
        first_name = require(first_name, "First name")
        last_name = require(last_name, "Last name")
        email = check_email(email)
        phone = check_phone(phone)

        with self._db.transaction() as store:
            teacher = get_teacher(store, teacher_id)

            same_email = store.get_by(Teacher, email=email)
            if same_email is not None and same_email.id != teacher_id:
                raise ConflictError(f"Email '{email}' is already used by another teacher")
            if department_id is not None:
                get_department(store, department_id)

            teacher.first_name = first_name
            teacher.last_name = last_name
            teacher.email = email
            teacher.phone = phone
            teacher.specialization = optional(specialization)
            teacher.hire_date = hire_date
            teacher.department_id = department_id
            try:
                teacher = store.save(teacher)
            except DuplicateRecordError as e:
                raise ConflictError(f"Email '{email}' is already used by another teacher") from e

            logger.info("Updated teacher %s (id=%s)", teacher.employee_number, teacher_id)
            return teacher

    def delete(self, teacher_id: int) -> None:
        """Delete a teacher without assigned courses.

        A linked user account survives; only the association is dropped.

        Raises:
            NotFoundError: If teacher doesn't exist
            ConflictError: If courses are still assigned to the teacher
        """
        with self._db.transaction() as store:
            teacher = get_teacher(store, teacher_id)

            course_count = store.count_by(Course, teacher_id=teacher_id)
            if course_count > 0:
                logger.warning(
                    "Refused to delete teacher %s: %d course(s) assigned",
                    teacher.employee_number,
                    course_count,
                )
                raise ConflictError(
                    f"Cannot delete teacher '{teacher.full_name}': has {course_count} course(s)"
                )

            if teacher.user_id is not None:
                logger.info("Unlinking user %s from teacher %s", teacher.user_id, teacher_id)
                teacher.user_id = None
                store.save(teacher)

            store.delete(teacher)
            logger.info("Deleted teacher %s (id=%s)", teacher.employee_number, teacher_id)
