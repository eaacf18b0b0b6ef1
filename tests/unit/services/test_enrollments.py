"""Unit tests for the enrollment engine."""

from datetime import date

import pytest

from scolarite.records import Department, Enrollment, EnrollmentStatus
from scolarite.services import (
    BusinessRuleError,
    CourseService,
    EnrollmentService,
    NotFoundError,
    StudentService,
    ValidationError,
)
from scolarite.services.enrollments import check_grade, drop, grade, regrade, status_for_grade


def _enrollment(status: EnrollmentStatus, value: float | None = None) -> Enrollment:
    return Enrollment(
        student_id=1,
        course_id=1,
        enrollment_date=date.today(),
        status=status.value,
        grade=value,
    )


@pytest.mark.unit
class TestGradeRules:
    """Pure transition rules, no database involved."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0.0, EnrollmentStatus.FAILED),
            (9.99, EnrollmentStatus.FAILED),
            (10.0, EnrollmentStatus.COMPLETED),
            (20.0, EnrollmentStatus.COMPLETED),
        ],
    )
    def test_status_for_grade(self, value: float, expected: EnrollmentStatus) -> None:
        assert status_for_grade(value) == expected

    @pytest.mark.parametrize("value", [-0.5, 20.01, 100.0])
    def test_grade_out_of_range(self, value: float) -> None:
        with pytest.raises(ValidationError, match="between 0 and 20"):
            check_grade(value)

    def test_drop_only_active(self) -> None:
        enrollment = _enrollment(EnrollmentStatus.ACTIVE)
        drop(enrollment)
        assert enrollment.enrollment_status == EnrollmentStatus.DROPPED

        final = (EnrollmentStatus.DROPPED, EnrollmentStatus.COMPLETED, EnrollmentStatus.FAILED)
        for status in final:
            with pytest.raises(BusinessRuleError, match="only ACTIVE"):
                drop(_enrollment(status))

    def test_grade_dropped_rejected_before_range_check(self) -> None:
        with pytest.raises(BusinessRuleError, match="dropped"):
            grade(_enrollment(EnrollmentStatus.DROPPED), 50.0)

    def test_grade_twice_rejected(self) -> None:
        enrollment = _enrollment(EnrollmentStatus.ACTIVE)
        grade(enrollment, 12.0)
        with pytest.raises(BusinessRuleError, match="already assigned"):
            grade(enrollment, 14.0)

    def test_regrade_without_grade(self) -> None:
        with pytest.raises(BusinessRuleError, match="No existing grade"):
            regrade(_enrollment(EnrollmentStatus.ACTIVE), 12.0, "copie recorrigee")

    def test_regrade_check_order(self) -> None:
        # Dropped beats range, range beats blank reason
        dropped = _enrollment(EnrollmentStatus.DROPPED, 8.0)
        with pytest.raises(BusinessRuleError):
            regrade(dropped, 30.0, "")

        completed = _enrollment(EnrollmentStatus.COMPLETED, 12.0)
        with pytest.raises(ValidationError, match="between"):
            regrade(completed, 30.0, "")
        with pytest.raises(ValidationError, match="reason"):
            regrade(completed, 8.0, "   ")

    def test_regrade_flips_status(self) -> None:
        enrollment = _enrollment(EnrollmentStatus.COMPLETED, 12.0)
        regrade(enrollment, 8.0, "erreur de saisie")
        assert enrollment.grade == 8.0
        assert enrollment.enrollment_status == EnrollmentStatus.FAILED

        regrade(enrollment, 10.0, "bareme revu")
        assert enrollment.enrollment_status == EnrollmentStatus.COMPLETED


@pytest.mark.unit
class TestEnroll:
    @pytest.fixture
    def student_id(self, students: StudentService, ginf: Department) -> int:
        return students.create("Amina", "Benali", "amina@example.com", ginf.id).id

    def test_enroll(
        self,
        enrollments: EnrollmentService,
        courses: CourseService,
        ginf: Department,
        student_id: int,
    ) -> None:
        course = courses.create("INF101", "Algorithmique", ginf.id)

        enrollment = enrollments.enroll(student_id, course.id)

        assert enrollment.id is not None
        assert enrollment.enrollment_status == EnrollmentStatus.ACTIVE
        assert enrollment.grade is None
        assert enrollment.enrollment_date == date.today()
        assert [e.id for e in enrollments.list_active_for_student(student_id)] == [enrollment.id]

    def test_cross_department_forbidden(
        self,
        enrollments: EnrollmentService,
        courses: CourseService,
        gc: Department,
        student_id: int,
    ) -> None:
        course = courses.create("GC101", "Beton", gc.id)

        with pytest.raises(BusinessRuleError, match="Cross-department"):
            enrollments.enroll(student_id, course.id)
        assert enrollments.list_for_student(student_id) == []

    def test_duplicate_enrollment_forbidden(
        self,
        enrollments: EnrollmentService,
        courses: CourseService,
        ginf: Department,
        student_id: int,
    ) -> None:
        course = courses.create("INF101", "Algorithmique", ginf.id)
        enrollments.enroll(student_id, course.id)

        with pytest.raises(BusinessRuleError, match="already enrolled"):
            enrollments.enroll(student_id, course.id)

    def test_re_enroll_after_drop_forbidden(
        self,
        enrollments: EnrollmentService,
        courses: CourseService,
        ginf: Department,
        student_id: int,
    ) -> None:
        course = courses.create("INF101", "Algorithmique", ginf.id)
        enrollments.drop_course(enrollments.enroll(student_id, course.id).id)

        with pytest.raises(BusinessRuleError, match="already enrolled"):
            enrollments.enroll(student_id, course.id)

    def test_full_course(
        self,
        enrollments: EnrollmentService,
        courses: CourseService,
        students: StudentService,
        ginf: Department,
        student_id: int,
    ) -> None:
        course = courses.create("INF101", "Algorithmique", ginf.id, max_students=1)
        other = students.create("Youssef", "Alaoui", "youssef@example.com", ginf.id)
        enrollments.enroll(other.id, course.id)

        with pytest.raises(BusinessRuleError, match=r"full \(maximum 1 students\)"):
            enrollments.enroll(student_id, course.id)

    def test_unknown_student_or_course(
        self,
        enrollments: EnrollmentService,
        courses: CourseService,
        ginf: Department,
        student_id: int,
    ) -> None:
        course = courses.create("INF101", "Algorithmique", ginf.id)
        with pytest.raises(NotFoundError, match="Student"):
            enrollments.enroll(404, course.id)
        with pytest.raises(NotFoundError, match="Course"):
            enrollments.enroll(student_id, 404)


@pytest.mark.unit
class TestTransitions:
    @pytest.fixture
    def enrollment_id(
        self,
        enrollments: EnrollmentService,
        students: StudentService,
        courses: CourseService,
        ginf: Department,
    ) -> int:
        student = students.create("Amina", "Benali", "amina@example.com", ginf.id)
        course = courses.create("INF101", "Algorithmique", ginf.id)
        return enrollments.enroll(student.id, course.id).id

    def test_drop(self, enrollments: EnrollmentService, enrollment_id: int) -> None:
        dropped = enrollments.drop_course(enrollment_id)
        assert dropped.enrollment_status == EnrollmentStatus.DROPPED

        with pytest.raises(BusinessRuleError):
            enrollments.drop_course(enrollment_id)

    def test_drop_graded_enrollment_forbidden(
        self, enrollments: EnrollmentService, enrollment_id: int
    ) -> None:
        enrollments.assign_grade(enrollment_id, 14.0)
        with pytest.raises(BusinessRuleError):
            enrollments.drop_course(enrollment_id)
        assert enrollments.get(enrollment_id).enrollment_status == EnrollmentStatus.COMPLETED

    def test_assign_passing_grade(self, enrollments: EnrollmentService, enrollment_id: int) -> None:
        graded = enrollments.assign_grade(enrollment_id, 10.0)
        assert graded.grade == 10.0
        assert graded.enrollment_status == EnrollmentStatus.COMPLETED

    def test_assign_failing_grade(self, enrollments: EnrollmentService, enrollment_id: int) -> None:
        graded = enrollments.assign_grade(enrollment_id, 9.5)
        assert graded.enrollment_status == EnrollmentStatus.FAILED

    def test_assign_out_of_range_keeps_enrollment_untouched(
        self, enrollments: EnrollmentService, enrollment_id: int
    ) -> None:
        with pytest.raises(ValidationError):
            enrollments.assign_grade(enrollment_id, 21.0)

        enrollment = enrollments.get(enrollment_id)
        assert enrollment.grade is None
        assert enrollment.enrollment_status == EnrollmentStatus.ACTIVE

    def test_assign_grade_to_dropped(
        self, enrollments: EnrollmentService, enrollment_id: int
    ) -> None:
        enrollments.drop_course(enrollment_id)
        with pytest.raises(BusinessRuleError):
            enrollments.assign_grade(enrollment_id, 12.0)

    def test_update_grade(self, enrollments: EnrollmentService, enrollment_id: int) -> None:
        enrollments.assign_grade(enrollment_id, 12.0)

        corrected = enrollments.update_grade(enrollment_id, 7.0, "erreur de report")

        assert corrected.grade == 7.0
        assert corrected.enrollment_status == EnrollmentStatus.FAILED

    def test_update_grade_requires_reason(
        self, enrollments: EnrollmentService, enrollment_id: int
    ) -> None:
        enrollments.assign_grade(enrollment_id, 12.0)
        with pytest.raises(ValidationError, match="reason"):
            enrollments.update_grade(enrollment_id, 14.0, None)
        assert enrollments.get(enrollment_id).grade == 12.0

    def test_update_grade_without_grade(
        self, enrollments: EnrollmentService, enrollment_id: int
    ) -> None:
        with pytest.raises(BusinessRuleError):
            enrollments.update_grade(enrollment_id, 14.0, "correction")

    def test_unknown_enrollment(self, enrollments: EnrollmentService) -> None:
        with pytest.raises(NotFoundError):
            enrollments.drop_course(404)
        with pytest.raises(NotFoundError):
            enrollments.assign_grade(404, 12.0)

    def test_status_override(self, enrollments: EnrollmentService, enrollment_id: int) -> None:
        enrollments.drop_course(enrollment_id)

        restored = enrollments.update_enrollment_status(enrollment_id, "ACTIVE")

        assert restored.enrollment_status == EnrollmentStatus.ACTIVE

    def test_status_override_unknown_status(
        self, enrollments: EnrollmentService, enrollment_id: int
    ) -> None:
        with pytest.raises(ValidationError, match="Unknown enrollment status"):
            enrollments.update_enrollment_status(enrollment_id, "PAUSED")
