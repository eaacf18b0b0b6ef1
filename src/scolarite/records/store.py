"""RecordStore - persistence primitives used by the lifecycle services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from scolarite.records.exceptions import DuplicateRecordError
from scolarite.records.models import Base

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

ModelT = TypeVar("ModelT", bound=Base)


class RecordStore:
    """Session-bound persistence primitives.

    A RecordStore lives for exactly one unit of work (see
    ``Database.transaction``). It offers lookups by identity, by unique field
    and by foreign key, live counts, and insert-or-update/delete operations
    that are flushed immediately so later steps of the same unit of work see
    their effect.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The underlying SQLAlchemy session."""
        return self._session

    # --- Reads ---

    def get(self, model: type[ModelT], record_id: int) -> ModelT | None:
        """Get a record by identity, or None."""
        return self._session.get(model, record_id)

    def get_for_update(self, model: type[ModelT], record_id: int) -> ModelT | None:
        """Get a record by identity, locking its row where the database supports it."""
        return self._session.get(model, record_id, with_for_update=True)

    def get_by(self, model: type[ModelT], **criteria: Any) -> ModelT | None:
        """Get the single record matching all criteria, or None."""
        stmt = select(model).filter_by(**criteria)
        return self._session.execute(stmt).scalar_one_or_none()

    def list_all(self, model: type[ModelT], order_by: Any = None) -> list[ModelT]:
        """List every record of a model, ordered by identity unless told otherwise."""
        stmt = select(model).order_by(order_by if order_by is not None else model.id)  # type: ignore[attr-defined]
        return list(self._session.execute(stmt).scalars().all())

    def list_by(self, model: type[ModelT], order_by: Any = None, **criteria: Any) -> list[ModelT]:
        """List records matching all criteria, ordered by identity unless told otherwise."""
        stmt = (
            select(model)
            .filter_by(**criteria)
            .order_by(order_by if order_by is not None else model.id)  # type: ignore[attr-defined]
        )
        return list(self._session.execute(stmt).scalars().all())

    def count_by(self, model: type[ModelT], **criteria: Any) -> int:
        """Count records matching all criteria against the database."""
        stmt = select(func.count()).select_from(model).filter_by(**criteria)
        return int(self._session.execute(stmt).scalar_one())

    def exists(self, model: type[ModelT], record_id: int) -> bool:
        """Check whether a record with this identity exists in the database."""
        return self.count_by(model, id=record_id) > 0

    def exists_by(self, model: type[ModelT], **criteria: Any) -> bool:
        """Check whether any record matches all criteria."""
        return self.count_by(model, **criteria) > 0

    # --- Writes ---

    def save(self, record: ModelT) -> ModelT:
        """Insert or update a record.

        The record is flushed and refreshed so that generated identities and
        timestamps are available to the caller right away.

        Raises:
            DuplicateRecordError: If the write violates a uniqueness constraint
        """
        self._session.add(record)
        self.flush()
        self._session.refresh(record)
        return record

    def delete(self, record: Base) -> None:
        """Delete a record and flush."""
        self._session.delete(record)
        self.flush()

    def delete_all(self, records: Iterable[Base]) -> int:
        """Delete several records and flush once.

        Returns:
            Number of records deleted
        """
        count = 0
        for record in records:
            self._session.delete(record)
            count += 1
        if count:
            self.flush()
        return count

    def flush(self) -> None:
        """Flush pending changes.

        Raises:
            DuplicateRecordError: If the flush violates a uniqueness constraint
        """
        try:
            self._session.flush()
        except IntegrityError as e:
            if "UNIQUE constraint failed" in str(e) or "duplicate key" in str(e):
                raise DuplicateRecordError(str(e.orig)) from e
            raise
