"""Record Store - persistent records for departments, people, courses and enrollments."""

from scolarite.records.database import Database
from scolarite.records.exceptions import DuplicateRecordError, RecordStoreError
from scolarite.records.models import (
    UNKNOWN_DEPARTMENT_CODE,
    Course,
    Department,
    DossierAdministratif,
    Enrollment,
    EnrollmentStatus,
    Role,
    Student,
    Teacher,
    User,
    generate_registration_number,
)
from scolarite.records.store import RecordStore

__all__ = [
    "UNKNOWN_DEPARTMENT_CODE",
    "Course",
    "Database",
    "Department",
    "DossierAdministratif",
    "DuplicateRecordError",
    "Enrollment",
    "EnrollmentStatus",
    "RecordStore",
    "RecordStoreError",
    "Role",
    "Student",
    "Teacher",
    "User",
    "generate_registration_number",
]
