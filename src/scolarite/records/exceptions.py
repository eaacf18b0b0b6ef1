"""Custom exceptions for the Record Store."""


class RecordStoreError(Exception):
    """Base exception for Record Store errors."""


class DuplicateRecordError(RecordStoreError):
    """A write violated a uniqueness constraint."""
