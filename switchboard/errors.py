"""Exception types raised by the Switchboard core."""

from __future__ import annotations


class SwitchboardError(Exception):
    """Base class for all Switchboard errors."""


class ValidationError(SwitchboardError, ValueError):
    """An operation received an unknown switch id or enum value."""


class CatalogError(SwitchboardError, LookupError):
    """The plan catalog is missing a template or is malformed.

    This is a configuration defect, never a "no data yet" condition.
    """


class PersistenceError(SwitchboardError, OSError):
    """A durable write failed.

    The in-memory state that triggered the write is already updated and
    remains usable; the next successful flush rewrites the file.
    """

    def __init__(self, path, cause: BaseException) -> None:
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = path
        self.cause = cause
