"""Error taxonomy for the SQLite value bridge.

Every failure that aborts an entry point is raised as a subclass of
SqliteValueError, so the host can report a precise cause. None of them
leave a partially-applied image behind: either a full new image is
produced or none is.

Projection mismatches (reading an INTEGER cell as text, for example) are
not errors; accessors return None for them.
"""

from __future__ import annotations


class SqliteValueError(Exception):
    """Base class for all bridge failures."""


class EngineOpenError(SqliteValueError):
    """SQLite could not open the image or file (malformed or incompatible)."""


class AllocationError(SqliteValueError):
    """The engine could not allocate a region for the image."""


class CaptureError(SqliteValueError):
    """The live database could not be serialized back into an image."""


class StatementError(SqliteValueError):
    """A statement failed to prepare or execute."""

    def __init__(self, message: str, statement: str | None = None) -> None:
        super().__init__(message)
        self.statement = statement


class InvalidIdentifierError(SqliteValueError, ValueError):
    """A table name contains characters outside the identifier allow-list."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Invalid table name: {identifier!r}")
        self.identifier = identifier


class BackupError(SqliteValueError):
    """A backup could not be set up or did not complete."""
