"""Student lifecycle: creation with its administrative dossier, and the deletion cascade."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from scolarite.records import (
    UNKNOWN_DEPARTMENT_CODE,
    Department,
    DossierAdministratif,
    DuplicateRecordError,
    Enrollment,
    Student,
    generate_registration_number,
)
from scolarite.services.departments import get_department
from scolarite.services.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ValidationError,
)
from scolarite.services.validation import check_email, check_phone, require

if TYPE_CHECKING:
    from scolarite.records import Database, RecordStore

logger = logging.getLogger(__name__)


def get_student(store: RecordStore, student_id: int) -> Student:
    """Resolve a student inside an open unit of work.

    Raises:
        NotFoundError: If the student doesn't exist
    """
    student = store.get(Student, student_id)
    if student is None:
        raise NotFoundError("Student", "id", student_id)
    return student


class StudentService:
    """Create, update and delete students.

    Every student owns exactly one DossierAdministratif, created in the same
    unit of work as the student. Deleting a student runs an ordered cascade:

    1. delete the student's enrollments
    2. delete the dossier
    3. unlink the user account (the account itself survives)
    4. delete the student, then verify it is gone

    Each step is flushed before the next starts, and the whole cascade is
    one transaction: if any step fails, nothing is removed.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Reads ---

    def get(self, student_id: int) -> Student:
        """Get student by ID.

        Raises:
            NotFoundError: If student doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return get_student(store, student_id)

    def get_by_user(self, user_id: int) -> Student:
        """Get the student linked to a user account.

        Raises:
            NotFoundError: If no student is linked to this user
        """
        with self._db.transaction(readonly=True) as store:
            student = store.get_by(Student, user_id=user_id)
            if student is None:
                raise NotFoundError("Student", "user_id", user_id)
            return student

    def list_all(self, department_id: int | None = None) -> list[Student]:
        """List students, optionally only those of one department."""
        with self._db.transaction(readonly=True) as store:
            if department_id is not None:
                return store.list_by(Student, department_id=department_id)
            return store.list_all(Student)

    def get_dossier(self, student_id: int) -> DossierAdministratif:
        """Get the administrative dossier of a student.

        Raises:
            NotFoundError: If the student or its dossier doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            get_student(store, student_id)
            dossier = store.get_by(DossierAdministratif, student_id=student_id)
            if dossier is None:
                raise NotFoundError("DossierAdministratif", "student_id", student_id)
            return dossier

    # --- Writes ---

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        department_id: int | None,
        phone: str | None = None,
        date_of_birth: date | None = None,
        enrollment_date: date | None = None,
    ) -> Student:
        """Create a student and its administrative dossier.

        Args:
            first_name: First name
            last_name: Last name
            email: Email address, unique across students
            department_id: Department the student belongs to (required)
            phone: Phone number (optional)
            date_of_birth: Date of birth (optional)
            enrollment_date: Defaults to today

        Returns:
            Created Student with generated ID

        Raises:
            ValidationError: On blank names/email, missing department, or bad phone/email format
            ConflictError: If the email is already used
            NotFoundError: If the department doesn't exist
        """
        first_name, last_name, email, phone, department_id = self._validate(
            first_name, last_name, email, phone, department_id
        )

        with self._db.transaction() as store:
            if store.exists_by(Student, email=email):
                raise ConflictError(f"Email '{email}' is already used")
            get_department(store, department_id)

            try:
                student = store.save(
                    Student(
                        first_name=first_name,
                        last_name=last_name,
                        email=email,
                        department_id=department_id,
                        enrollment_date=enrollment_date or date.today(),
                        phone=phone,
                        date_of_birth=date_of_birth,
                    )
                )
            except DuplicateRecordError as e:
                raise ConflictError(f"Email '{email}' is already used") from e
            logger.info("Created student %s (id=%s)", student.full_name, student.id)

            dossier = self._create_dossier(store, student)
            logger.info(
                "Created dossier %s for student %s", dossier.registration_number, student.id
            )
            return student

    def update(
        self,
        student_id: int,
        first_name: str,
        last_name: str,
        email: str,
        department_id: int | None,
        phone: str | None = None,
        date_of_birth: date | None = None,
    ) -> Student:
        """Replace a student's fields.

        Changing department only reassigns the reference; the dossier keeps
        its original registration number.

        Raises:
            NotFoundError: If student or department doesn't exist
            ValidationError: On blank names/email, missing department, or bad phone/email format
            ConflictError: If the email belongs to another student
        """
        first_name, last_name, email, phone, department_id = self._validate(
            first_name, last_name, email, phone, department_id
        )

        with self._db.transaction() as store:
            student = get_student(store, student_id)

            same_email = store.get_by(Student, email=email)
            if same_email is not None and same_email.id != student_id:
                raise ConflictError(f"Email '{email}' is already used")

            if department_id != student.department_id:
                get_department(store, department_id)
                logger.info(
                    "Moving student %s from department %s to %s",
                    student_id,
                    student.department_id,
                    department_id,
                )

            student.first_name = first_name
            student.last_name = last_name
            student.email = email
            student.phone = phone
            student.date_of_birth = date_of_birth
            student.department_id = department_id
            try:
                student = store.save(student)
            except DuplicateRecordError as e:
                raise ConflictError(f"Email '{email}' is already used") from e

            logger.info("Updated student %s (id=%s)", student.full_name, student_id)
            return student

    def delete(self, student_id: int) -> None:
        """Delete a student and everything it owns.

        Raises:
            NotFoundError: If student doesn't exist
            ConsistencyError: If the student still exists after deletion
        """
        with self._db.transaction() as store:
            student = get_student(store, student_id)
            name = student.full_name
            logger.info("Deleting student %s (id=%s)", name, student_id)

            # 1. Enrollments
            enrollments = store.list_by(Enrollment, student_id=student_id)
            removed = store.delete_all(enrollments)
            logger.info("Deleted %d enrollment(s) of student %s", removed, student_id)

            # 2. Dossier
            dossier = store.get_by(DossierAdministratif, student_id=student_id)
            if dossier is not None:
                store.delete(dossier)
                logger.info("Deleted dossier %s", dossier.registration_number)

            # 3. User link
            if student.user_id is not None:
                user_id = student.user_id
                student.user_id = None
                store.save(student)
                logger.info("Unlinked user %s from student %s", user_id, student_id)

            # 4. Student
            store.delete(student)
            if store.exists(Student, student_id):
                logger.error("Student %s still exists after deletion", student_id)
                raise ConsistencyError(f"Student {student_id} still exists after deletion")

            logger.info("Deleted student %s (id=%s)", name, student_id)

    # --- Helpers ---

    @staticmethod
    def _create_dossier(store: RecordStore, student: Student) -> DossierAdministratif:
        department = store.get(Department, student.department_id)
        code = department.code if department is not None else UNKNOWN_DEPARTMENT_CODE
        try:
            return store.save(
                DossierAdministratif(
                    student_id=student.id,
                    registration_number=generate_registration_number(code, student.id),
                    creation_date=date.today(),
                )
            )
        except DuplicateRecordError as e:
            raise ConflictError(f"A dossier already exists for student {student.id}") from e

    @staticmethod
    def _validate(
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        phone: str | None,
        department_id: int | None,
    ) -> tuple[str, str, str, str | None, int]:
        first_name = require(first_name, "First name")
        last_name = require(last_name, "Last name")
        email = check_email(email)
        if department_id is None:
            raise ValidationError("Department is required")
        phone = check_phone(phone)
        return first_name, last_name, email, phone, department_id
