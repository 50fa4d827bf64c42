"""Handle entity: one live, exclusively-owned SQLite connection.

A handle exists only for the duration of a single entry-point call. It is
created by the ownership bridge (materialize or open_persistent) and must be
captured back into an image, or discarded, before the call returns.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Files SQLite may keep next to a database while it is open.
SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")


class HandleBacking(Enum):
    """What the handle's database pages live in."""

    MEMORY = "memory"
    FILE = "file"


@dataclass
class Handle:
    """A live connection to one private SQLite instance.

    Attributes:
        connection: The underlying sqlite3 connection.
        backing: Whether pages live in engine-owned memory or a file.
        path: The backing file for FILE handles, None for MEMORY handles.
        read_only: True when the handle was opened with query_only set.
        transient: True when the backing file belongs to the handle and is
            removed once the handle is captured or discarded.

    Thread Safety:
        Not shareable. All operations against one handle are sequential.
    """

    connection: sqlite3.Connection
    backing: HandleBacking
    path: Path | None = None
    read_only: bool = False
    transient: bool = False
    _closed: bool = field(default=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def ensure_open(self) -> sqlite3.Connection:
        """Return the connection, failing if the handle was already closed."""
        if self._closed:
            raise RuntimeError("Handle is closed")
        return self.connection

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.connection.close()
        if self.transient and self.path is not None:
            self.path.unlink(missing_ok=True)
            for suffix in SIDECAR_SUFFIXES:
                Path(f"{self.path}{suffix}").unlink(missing_ok=True)

    def __enter__(self) -> Handle:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
