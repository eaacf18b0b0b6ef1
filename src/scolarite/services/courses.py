"""Course lifecycle: capacity, uniqueness and deletion-safety rules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scolarite.records import Course, DuplicateRecordError, Enrollment, EnrollmentStatus, Student
from scolarite.services.departments import get_department
from scolarite.services.exceptions import ConflictError, NotFoundError, ValidationError
from scolarite.services.teachers import get_teacher
from scolarite.services.validation import optional, require

if TYPE_CHECKING:
    from scolarite.records import Database, RecordStore

logger = logging.getLogger(__name__)

DEFAULT_CREDITS = 3
DEFAULT_MAX_STUDENTS = 30

# Statuses that make a course permanent: it can't be deleted while any exist
BLOCKING_STATUSES = (EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED)


def get_course(store: RecordStore, course_id: int, lock: bool = False) -> Course:
    """Resolve a course inside an open unit of work.

    Args:
        store: Store of the current unit of work
        course_id: The course's ID
        lock: Lock the course row until the unit of work ends

    Raises:
        NotFoundError: If the course doesn't exist
    """
    course = store.get_for_update(Course, course_id) if lock else store.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course", "id", course_id)
    return course


def enrollment_count(store: RecordStore, course_id: int) -> int:
    """Count enrollment rows of a course against the database."""
    return store.count_by(Enrollment, course_id=course_id)


def is_full(store: RecordStore, course: Course) -> bool:
    return enrollment_count(store, course.id) >= course.max_students


class CourseService:
    """Create, update and delete courses, and answer capacity questions.

    Capacity is always computed from a live count of enrollment rows, never
    from a cached collection.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Reads ---

    def get(self, course_id: int) -> Course:
        """Get course by ID.

        Raises:
            NotFoundError: If course doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return get_course(store, course_id)

    def list_all(self, department_id: int | None = None) -> list[Course]:
        """List courses, optionally only those offered by one department."""
        with self._db.transaction(readonly=True) as store:
            if department_id is not None:
                return store.list_by(Course, department_id=department_id)
            return store.list_all(Course)

    def list_for_teacher(self, teacher_id: int) -> list[Course]:
        """List courses assigned to a teacher."""
        with self._db.transaction(readonly=True) as store:
            get_teacher(store, teacher_id)
            return store.list_by(Course, teacher_id=teacher_id)

    def courses_for_student(self, student_id: int) -> list[Course]:
        """List courses the student holds an enrollment in, whatever its status."""
        with self._db.transaction(readonly=True) as store:
            if store.get(Student, student_id) is None:
                raise NotFoundError("Student", "id", student_id)
            enrollments = store.list_by(Enrollment, student_id=student_id)
            return [get_course(store, e.course_id) for e in enrollments]

    def available_courses_for_student(self, student_id: int) -> list[Course]:
        """List courses a student could enroll in right now.

        That is: courses of the student's own department that the student
        isn't enrolled in yet and that still have a free seat.

        Raises:
            NotFoundError: If student doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            student = store.get(Student, student_id)
            if student is None:
                raise NotFoundError("Student", "id", student_id)

            enrolled = {e.course_id for e in store.list_by(Enrollment, student_id=student_id)}
            return [
                course
                for course in store.list_by(Course, department_id=student.department_id)
                if course.id not in enrolled and not is_full(store, course)
            ]

    def current_enrollment_count(self, course_id: int) -> int:
        """Live number of enrollment rows for the course.

        Raises:
            NotFoundError: If course doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            get_course(store, course_id)
            return enrollment_count(store, course_id)

    def is_full(self, course_id: int) -> bool:
        """Whether the course has reached its capacity.

        Raises:
            NotFoundError: If course doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return is_full(store, get_course(store, course_id))

    # --- Writes ---

    def create(
        self,
        code: str,
        name: str,
        department_id: int | None,
        description: str | None = None,
        credits: int | None = None,
        max_students: int | None = None,
        teacher_id: int | None = None,
    ) -> Course:
        """Create a new course.

        Args:
            code: Unique course code
            name: Display name
            department_id: Department offering the course (required)
            description: Free text (optional)
            credits: Credit value, defaults to 3
            max_students: Capacity, defaults to 30
            teacher_id: Teacher in charge (optional)

        Returns:
            Created Course with generated ID

        Raises:
            ValidationError: On blank code/name, missing department, or non-positive numbers
            ConflictError: If the code is already used
            NotFoundError: If department or teacher doesn't exist
        """
        credits = DEFAULT_CREDITS if credits is None else credits
        max_students = DEFAULT_MAX_STUDENTS if max_students is None else max_students
        code, name, department_id = self._validate(code, name, department_id, credits, max_students)

        with self._db.transaction() as store:
            if store.exists_by(Course, code=code):
                raise ConflictError(f"Course code '{code}' already exists")
            get_department(store, department_id)
            if teacher_id is not None:
                get_teacher(store, teacher_id)

            try:
                course = store.save(
                    Course(
                        code=code,
                        name=name,
                        department_id=department_id,
                        description=optional(description),
                        credits=credits,
                        max_students=max_students,
                        teacher_id=teacher_id,
                    )
                )
            except DuplicateRecordError as e:
                raise ConflictError(f"Course code '{code}' already exists") from e

            logger.info("Created course %s (id=%s)", course.code, course.id)
            return course

    def update(
        self,
        course_id: int,
        code: str,
        name: str,
        department_id: int | None,
        description: str | None = None,
        credits: int | None = None,
        max_students: int | None = None,
        teacher_id: int | None = None,
    ) -> Course:
        """Replace a course's fields.

        Omitted credits/max_students keep their current values. Capacity can
        never shrink below the number of enrollments already recorded.

        Raises:
            NotFoundError: If course, department or teacher doesn't exist
            ValidationError: On blank code/name, missing department, or non-positive numbers
            ConflictError: If the code belongs to another course, or the new
                capacity is below the current enrollment count
        """
        with self._db.transaction() as store:
            course = get_course(store, course_id, lock=True)

            credits = course.credits if credits is None else credits
            max_students = course.max_students if max_students is None else max_students
            code, name, department_id = self._validate(
                code, name, department_id, credits, max_students
            )

            same_code = store.get_by(Course, code=code)
            if same_code is not None and same_code.id != course_id:
                raise ConflictError(f"Course code '{code}' already exists")

            current = enrollment_count(store, course_id)
            if max_students < current:
                raise ConflictError(
                    f"Cannot reduce capacity of '{course.code}' to {max_students}: "
                    f"{current} student(s) already enrolled"
                )

            get_department(store, department_id)
            if teacher_id is not None:
                get_teacher(store, teacher_id)

            course.code = code
            course.name = name
            course.description = optional(description)
            course.credits = credits
            course.max_students = max_students
            course.department_id = department_id
            course.teacher_id = teacher_id
            try:
                course = store.save(course)
            except DuplicateRecordError as e:
                raise ConflictError(f"Course code '{code}' already exists") from e

            logger.info("Updated course %s (id=%s)", course.code, course_id)
            return course

    def delete(self, course_id: int) -> None:
        """Delete a course.

        Blocked while any enrollment is ACTIVE or COMPLETED. DROPPED and
        FAILED enrollments are purged first, then the course is removed.

        Raises:
            NotFoundError: If course doesn't exist
            ConflictError: If active or completed enrollments exist
        """
        with self._db.transaction() as store:
            course = get_course(store, course_id, lock=True)
            enrollments = store.list_by(Enrollment, course_id=course_id)

            blocking = [e for e in enrollments if e.enrollment_status in BLOCKING_STATUSES]
            if blocking:
                active = sum(1 for e in blocking if e.enrollment_status == EnrollmentStatus.ACTIVE)
                completed = len(blocking) - active
                logger.warning(
                    "Refused to delete course %s: %d active, %d completed enrollment(s)",
                    course.code,
                    active,
                    completed,
                )
                details = []
                if active:
                    details.append(f"{active} active enrollment(s)")
                if completed:
                    details.append(f"{completed} completed enrollment(s)")
                raise ConflictError(
                    f"Cannot delete course '{course.name}' ({course.code}): has "
                    + " and ".join(details)
                )

            purged = store.delete_all(enrollments)
            if purged:
                logger.info("Purged %d dropped/failed enrollment(s) of course %s", purged, course.code)

            store.delete(course)
            logger.info("Deleted course %s (id=%s)", course.code, course_id)

    # --- Validation ---

    @staticmethod
    def _validate(
        code: str | None,
        name: str | None,
        department_id: int | None,
        credits: int,
        max_students: int,
    ) -> tuple[str, str, int]:
        code = require(code, "Course code")
        name = require(name, "Course name")
        if department_id is None:
            raise ValidationError("A course must belong to a department")
        if credits <= 0:
            raise ValidationError("Credits must be a positive number")
        if max_students <= 0:
            raise ValidationError("Maximum number of students must be a positive number")
        return code, name, department_id
