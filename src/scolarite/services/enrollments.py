"""Enrollment engine: eligibility, status transitions and grading.

Status machine::

    ACTIVE --drop-->            DROPPED
    ACTIVE --grade >= 10-->     COMPLETED
    ACTIVE --grade <  10-->     FAILED
    COMPLETED/FAILED --regrade--> COMPLETED/FAILED

DROPPED is final: it can be neither graded nor dropped again. COMPLETED and
FAILED are permanent academic records that can't be dropped; their grade
can only change through ``regrade``, which requires a reason.
``update_enrollment_status`` is an administrative escape hatch that
bypasses all of the above.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from scolarite.records import DuplicateRecordError, Enrollment, EnrollmentStatus
from scolarite.services.courses import enrollment_count, get_course
from scolarite.services.exceptions import BusinessRuleError, NotFoundError, ValidationError
from scolarite.services.students import get_student
from scolarite.services.validation import is_blank

if TYPE_CHECKING:
    from scolarite.records import Database, RecordStore

logger = logging.getLogger(__name__)

MIN_GRADE = 0.0
MAX_GRADE = 20.0
PASSING_GRADE = 10.0


def check_grade(grade: float) -> float:
    """Validate a grade on the closed [0, 20] scale.

    Raises:
        ValidationError: If the grade is outside [0, 20] or not a number
    """
    if not MIN_GRADE <= grade <= MAX_GRADE:
        raise ValidationError(
            f"Grade must be between {MIN_GRADE:g} and {MAX_GRADE:g}, got {grade}"
        )
    return float(grade)


def status_for_grade(grade: float) -> EnrollmentStatus:
    """COMPLETED for a grade of 10 or more, FAILED below."""
    return EnrollmentStatus.COMPLETED if grade >= PASSING_GRADE else EnrollmentStatus.FAILED


def drop(enrollment: Enrollment) -> None:
    """ACTIVE -> DROPPED.

    Raises:
        BusinessRuleError: If the enrollment is not ACTIVE
    """
    if enrollment.enrollment_status != EnrollmentStatus.ACTIVE:
        raise BusinessRuleError(
            f"Cannot drop enrollment {enrollment.id}: status is {enrollment.status}, "
            "only ACTIVE enrollments can be dropped"
        )
    enrollment.enrollment_status = EnrollmentStatus.DROPPED


def grade(enrollment: Enrollment, value: float) -> None:
    """Initial grading: record the grade and derive COMPLETED/FAILED.

    Raises:
        BusinessRuleError: If the enrollment is DROPPED or already graded
        ValidationError: If the grade is outside [0, 20]
    """
    status = enrollment.enrollment_status
    if status == EnrollmentStatus.DROPPED:
        raise BusinessRuleError("Cannot assign a grade to a dropped enrollment")
    value = check_grade(value)
    if enrollment.grade is not None and status in (
        EnrollmentStatus.COMPLETED,
        EnrollmentStatus.FAILED,
    ):
        raise BusinessRuleError(
            f"Grade already assigned ({enrollment.grade:.2f}); use a grade correction instead"
        )
    enrollment.grade = value
    enrollment.enrollment_status = status_for_grade(value)


def regrade(enrollment: Enrollment, value: float, reason: str | None) -> None:
    """Grade correction: replace an existing grade and re-derive the status.

    Raises:
        BusinessRuleError: If there is no grade yet, or the enrollment is DROPPED
        ValidationError: If the grade is outside [0, 20] or the reason is blank
    """
    if enrollment.grade is None:
        raise BusinessRuleError("No existing grade to correct; assign a grade first")
    if enrollment.enrollment_status == EnrollmentStatus.DROPPED:
        raise BusinessRuleError("Cannot correct the grade of a dropped enrollment")
    value = check_grade(value)
    if is_blank(reason):
        raise ValidationError("A reason must be given for a grade correction")
    enrollment.grade = value
    enrollment.enrollment_status = status_for_grade(value)


def get_enrollment(store: RecordStore, enrollment_id: int) -> Enrollment:
    """Resolve an enrollment inside an open unit of work.

    Raises:
        NotFoundError: If the enrollment doesn't exist
    """
    enrollment = store.get(Enrollment, enrollment_id)
    if enrollment is None:
        raise NotFoundError("Enrollment", "id", enrollment_id)
    return enrollment


class EnrollmentService:
    """Enroll students into courses, and move enrollments through their statuses."""

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Reads ---

    def get(self, enrollment_id: int) -> Enrollment:
        """Get enrollment by ID.

        Raises:
            NotFoundError: If enrollment doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return get_enrollment(store, enrollment_id)

    def list_for_student(self, student_id: int) -> list[Enrollment]:
        """All enrollments of a student, whatever their status."""
        with self._db.transaction(readonly=True) as store:
            return store.list_by(Enrollment, student_id=student_id)

    def list_active_for_student(self, student_id: int) -> list[Enrollment]:
        """ACTIVE enrollments of a student."""
        with self._db.transaction(readonly=True) as store:
            return store.list_by(
                Enrollment, student_id=student_id, status=EnrollmentStatus.ACTIVE.value
            )

    def list_for_course(self, course_id: int) -> list[Enrollment]:
        """All enrollments of a course, whatever their status."""
        with self._db.transaction(readonly=True) as store:
            return store.list_by(Enrollment, course_id=course_id)

    # --- Transitions ---

    def enroll(self, student_id: int, course_id: int) -> Enrollment:
        """Enroll a student into a course of their own department.

        The course row is locked for the duration of the check-and-insert,
        and the (student, course) pair is backed by a unique constraint.

        Returns:
            The new ACTIVE enrollment

        Raises:
            NotFoundError: If student or course doesn't exist
            BusinessRuleError: If the course belongs to another department,
                the student is already enrolled, or the course is full
        """
        with self._db.transaction() as store:
            student = get_student(store, student_id)
            course = get_course(store, course_id, lock=True)

            if course.department_id != student.department_id:
                raise BusinessRuleError(
                    f"Cross-department enrollment forbidden: student {student_id} belongs to "
                    f"department {student.department_id}, course '{course.code}' to "
                    f"department {course.department_id}"
                )

            if store.exists_by(Enrollment, student_id=student_id, course_id=course_id):
                raise BusinessRuleError(
                    f"Student {student_id} is already enrolled in course '{course.code}'"
                )

            current = enrollment_count(store, course_id)
            if current >= course.max_students:
                raise BusinessRuleError(
                    f"Course '{course.code}' is full (maximum {course.max_students} students)"
                )

            try:
                enrollment = store.save(
                    Enrollment(
                        student_id=student_id,
                        course_id=course_id,
                        enrollment_date=date.today(),
                    )
                )
            except DuplicateRecordError as e:
                raise BusinessRuleError(
                    f"Student {student_id} is already enrolled in course '{course.code}'"
                ) from e

            logger.info(
                "Enrolled student %s in course %s (%d/%d)",
                student_id,
                course.code,
                current + 1,
                course.max_students,
            )
            return enrollment

    def drop_course(self, enrollment_id: int) -> Enrollment:
        """Drop an ACTIVE enrollment.

        Raises:
            NotFoundError: If enrollment doesn't exist
            BusinessRuleError: If the enrollment is not ACTIVE
        """
        with self._db.transaction() as store:
            enrollment = get_enrollment(store, enrollment_id)
            drop(enrollment)
            enrollment = store.save(enrollment)
            logger.info("Dropped enrollment %s", enrollment_id)
            return enrollment

    def assign_grade(self, enrollment_id: int, value: float) -> Enrollment:
        """Assign the initial grade of an enrollment.

        Raises:
            NotFoundError: If enrollment doesn't exist
            BusinessRuleError: If the enrollment is DROPPED or already graded
            ValidationError: If the grade is outside [0, 20]
        """
        with self._db.transaction() as store:
            enrollment = get_enrollment(store, enrollment_id)
            grade(enrollment, value)
            enrollment = store.save(enrollment)
            logger.info(
                "Graded enrollment %s: %.2f (%s)", enrollment_id, enrollment.grade, enrollment.status
            )
            return enrollment

    def update_grade(self, enrollment_id: int, value: float, reason: str | None) -> Enrollment:
        """Correct an existing grade.

        Raises:
            NotFoundError: If enrollment doesn't exist
            BusinessRuleError: If there is no grade yet, or the enrollment is DROPPED
            ValidationError: If the grade is outside [0, 20] or the reason is blank
        """
        with self._db.transaction() as store:
            enrollment = get_enrollment(store, enrollment_id)
            previous = enrollment.grade
            regrade(enrollment, value, reason)
            enrollment = store.save(enrollment)
            logger.info(
                "Corrected grade of enrollment %s: %.2f -> %.2f (%s), reason: %s",
                enrollment_id,
                previous,
                enrollment.grade,
                enrollment.status,
                reason,
            )
            return enrollment

    def update_enrollment_status(
        self, enrollment_id: int, status: EnrollmentStatus | str
    ) -> Enrollment:
        """Set an enrollment's status without any transition check.

        Administrative use only.

        Raises:
            NotFoundError: If enrollment doesn't exist
            ValidationError: If status is not a known EnrollmentStatus
        """
        try:
            new_status = EnrollmentStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown enrollment status '{status}'") from e

        with self._db.transaction() as store:
            enrollment = get_enrollment(store, enrollment_id)
            logger.warning(
                "Status override on enrollment %s: %s -> %s",
                enrollment_id,
                enrollment.status,
                new_status.value,
            )
            enrollment.enrollment_status = new_status
            return store.save(enrollment)
