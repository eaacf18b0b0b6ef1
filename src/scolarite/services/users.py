"""User accounts: credentials, roles and links to students and teachers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from werkzeug.security import check_password_hash, generate_password_hash

from scolarite.records import DuplicateRecordError, Role, Student, Teacher, User
from scolarite.services.exceptions import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from scolarite.services.students import get_student
from scolarite.services.teachers import get_teacher
from scolarite.services.validation import (
    check_email,
    check_password_strength,
    check_username,
    optional,
)

if TYPE_CHECKING:
    from scolarite.records import Database, RecordStore

logger = logging.getLogger(__name__)


def get_user(store: RecordStore, user_id: int) -> User:
    """Resolve a user inside an open unit of work.

    Raises:
        NotFoundError: If the user doesn't exist
    """
    user = store.get(User, user_id)
    if user is None:
        raise NotFoundError("User", "id", user_id)
    return user


def _check_role(role: Role | str | None) -> Role:
    if role is None:
        raise ValidationError("Role is required")
    try:
        return Role(role)
    except ValueError as e:
        raise ValidationError(f"Unknown role '{role}'") from e


class UserService:
    """Manage user accounts.

    Passwords are stored as Werkzeug hashes. The last ADMIN account, and any
    account still linked to a student or teacher, cannot be deleted. The last
    ADMIN cannot be demoted or disabled either, and a linked account keeps
    the role of the record it is linked to.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- Reads ---

    def get(self, user_id: int) -> User:
        """Get user by ID.

        Raises:
            NotFoundError: If user doesn't exist
        """
        with self._db.transaction(readonly=True) as store:
            return get_user(store, user_id)

    def get_by_username(self, username: str) -> User:
        """Get user by username.

        Raises:
            NotFoundError: If no user has this username
        """
        with self._db.transaction(readonly=True) as store:
            user = store.get_by(User, username=username)
            if user is None:
                raise NotFoundError("User", "username", username)
            return user

    def list_all(self) -> list[User]:
        """List all users, ordered by username."""
        with self._db.transaction(readonly=True) as store:
            return store.list_all(User, order_by=User.username)

    def count_by_role(self, role: Role | str) -> int:
        with self._db.transaction(readonly=True) as store:
            return store.count_by(User, role=_check_role(role).value)

    def verify_credentials(self, username: str, password: str) -> User | None:
        """Check a username/password pair.

        Returns:
            The user if it exists, is enabled and the password matches; None otherwise
        """
        with self._db.transaction(readonly=True) as store:
            user = store.get_by(User, username=username)
            if user is None or not user.enabled:
                logger.info("Rejected login for %r", username)
                return None
            if not check_password_hash(user.password_hash, password):
                logger.info("Rejected login for %r: bad password", username)
                return None
            return user

    # --- Writes ---

    def create(
        self,
        username: str,
        email: str,
        password: str,
        role: Role | str,
        enabled: bool = True,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Create a user account.

        Returns:
            Created User with generated ID

        Raises:
            ValidationError: On blank or short username, blank email, bad email
                format, weak password or unknown role
            ConflictError: If username or email is already used
        """
        username = check_username(username)
        email = check_email(email)
        role = _check_role(role)
        password = check_password_strength(password)

        with self._db.transaction() as store:
            self._check_unique(store, username, email)
            try:
                user = store.save(
                    User(
                        username=username,
                        email=email,
                        password_hash=generate_password_hash(password),
                        role=role.value,
                        enabled=enabled,
                        first_name=optional(first_name),
                        last_name=optional(last_name),
                    )
                )
            except DuplicateRecordError as e:
                raise ConflictError(f"User '{username}' already exists") from e

            logger.info("Created user %s (id=%s, role=%s)", user.username, user.id, user.role)
            return user

    def update(
        self,
        user_id: int,
        username: str,
        email: str,
        role: Role | str,
        enabled: bool | None = None,
        password: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Replace a user's fields. The password changes only when one is given.

        Raises:
            NotFoundError: If user doesn't exist
            ValidationError: On blank or short username, blank email, bad email
                format, weak password or unknown role
            BusinessRuleError: If the new role no longer matches a linked
                student or teacher record
            ConflictError: If username or email belongs to another user, or the
                change would demote or disable the last ADMIN
        """
        username = check_username(username)
        email = check_email(email)
        role = _check_role(role)
        if password:
            password = check_password_strength(password)

        with self._db.transaction() as store:
            user = get_user(store, user_id)
            self._check_unique(store, username, email, exclude_id=user_id)
            self._check_role_change(store, user, role)
            if user.user_role == Role.ADMIN and role != Role.ADMIN:
                self._check_not_last_admin(store, user, "demote")
            elif user.user_role == Role.ADMIN and enabled is False and user.enabled:
                self._check_not_last_admin(store, user, "disable", enabled_only=True)

            user.username = username
            user.email = email
            user.role = role.value
            user.first_name = optional(first_name)
            user.last_name = optional(last_name)
            if enabled is not None:
                user.enabled = enabled
            if password:
                user.password_hash = generate_password_hash(password)
                logger.info("Password changed for user %s", username)
            try:
                user = store.save(user)
            except DuplicateRecordError as e:
                raise ConflictError(f"User '{username}' already exists") from e

            logger.info("Updated user %s (id=%s)", user.username, user_id)
            return user

    def delete(self, user_id: int) -> None:
        """Delete a user account.

        Raises:
            NotFoundError: If user doesn't exist
            ConflictError: If it is the last ADMIN, or a student/teacher is linked to it
        """
        with self._db.transaction() as store:
            user = get_user(store, user_id)

            if user.user_role == Role.ADMIN:
                self._check_not_last_admin(store, user, "delete")
            if store.exists_by(Student, user_id=user_id):
                raise ConflictError(
                    f"Cannot delete user '{user.username}': linked to a student; "
                    "delete the student first"
                )
            if store.exists_by(Teacher, user_id=user_id):
                raise ConflictError(
                    f"Cannot delete user '{user.username}': linked to a teacher; "
                    "delete the teacher first"
                )

            store.delete(user)
            logger.info("Deleted user %s (id=%s)", user.username, user_id)

    def link_student(self, user_id: int, student_id: int) -> Student:
        """Attach a STUDENT account to a student record.

        Raises:
            NotFoundError: If user or student doesn't exist
            BusinessRuleError: If the account's role is not STUDENT
            ConflictError: If either side is already linked elsewhere
        """
        with self._db.transaction() as store:
            user = get_user(store, user_id)
            student = get_student(store, student_id)
            if user.user_role != Role.STUDENT:
                raise BusinessRuleError(f"User '{user.username}' does not have the STUDENT role")
            self._check_link_free(store, user, student.user_id)

            student.user_id = user_id
            try:
                student = store.save(student)
            except DuplicateRecordError as e:
                raise ConflictError(f"User '{user.username}' is already linked") from e
            logger.info("Linked user %s to student %s", user.username, student_id)
            return student

    def link_teacher(self, user_id: int, teacher_id: int) -> Teacher:
        """Attach a TEACHER account to a teacher record.

        Raises:
            NotFoundError: If user or teacher doesn't exist
            BusinessRuleError: If the account's role is not TEACHER
            ConflictError: If either side is already linked elsewhere
        """
        with self._db.transaction() as store:
            user = get_user(store, user_id)
            teacher = get_teacher(store, teacher_id)
            if user.user_role != Role.TEACHER:
                raise BusinessRuleError(f"User '{user.username}' does not have the TEACHER role")
            self._check_link_free(store, user, teacher.user_id)

            teacher.user_id = user_id
            try:
                teacher = store.save(teacher)
            except DuplicateRecordError as e:
                raise ConflictError(f"User '{user.username}' is already linked") from e
            logger.info("Linked user %s to teacher %s", user.username, teacher_id)
            return teacher

    # --- Helpers ---

    @staticmethod
    def _check_unique(
        store: RecordStore, username: str, email: str, exclude_id: int | None = None
    ) -> None:
        same_username = store.get_by(User, username=username)
        if same_username is not None and same_username.id != exclude_id:
            raise ConflictError(f"Username '{username}' is already used")
        same_email = store.get_by(User, email=email)
        if same_email is not None and same_email.id != exclude_id:
            raise ConflictError(f"Email '{email}' is already used")

    @staticmethod
    def _check_link_free(store: RecordStore, user: User, current_user_id: int | None) -> None:
        if current_user_id is not None and current_user_id != user.id:
            raise ConflictError(f"Record is already linked to user {current_user_id}")
        if current_user_id == user.id:
            return
        if store.exists_by(Student, user_id=user.id) or store.exists_by(Teacher, user_id=user.id):
            raise ConflictError(f"User '{user.username}' is already linked to another record")

    @staticmethod
    def _check_role_change(store: RecordStore, user: User, role: Role) -> None:
        if role != Role.STUDENT and store.exists_by(Student, user_id=user.id):
            raise BusinessRuleError(
                f"User '{user.username}' is linked to a student and must keep the STUDENT role"
            )
        if role != Role.TEACHER and store.exists_by(Teacher, user_id=user.id):
            raise BusinessRuleError(
                f"User '{user.username}' is linked to a teacher and must keep the TEACHER role"
            )

    @staticmethod
    def _check_not_last_admin(
        store: RecordStore, user: User, action: str, enabled_only: bool = False
    ) -> None:
        criteria: dict[str, object] = {"role": Role.ADMIN.value}
        if enabled_only:
            criteria["enabled"] = True
        if store.count_by(User, **criteria) <= 1:
            logger.warning("Refused to %s %s: last administrator", action, user.username)
            raise ConflictError(f"Cannot {action} the last administrator")
