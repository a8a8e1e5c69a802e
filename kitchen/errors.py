"""Error taxonomy for data access."""

from __future__ import annotations


class KitchenError(Exception):
    """Base class for errors raised by this package."""


class DataAccessError(KitchenError):
    """The store could not complete a list/create/update call."""


class ValidationError(DataAccessError, ValueError):
    """A create/update payload was rejected (unknown field, broken reference, bad value)."""


class NotFoundError(DataAccessError):
    """No record of the given kind has the requested identifier."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} {record_id!r} not found")
        self.kind = kind
        self.record_id = record_id
