"""Errors raised by the record store and its surfaces.

The CSV codec itself never raises for malformed input.
"""


class PromptpadError(Exception):
    """Base error for this package."""


class RecordNotFoundError(PromptpadError):
    """Raised when a record id is not present in the store."""

    def __init__(self, record_id: str):
        super().__init__(f"record not found: {record_id!r}")
        self.record_id = record_id


class StoreError(PromptpadError):
    """Raised when the persisted store cannot be read or written."""
