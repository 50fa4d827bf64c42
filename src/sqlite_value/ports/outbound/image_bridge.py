"""Image Bridge port: the allocator-safe load/dump pair.

This outbound port defines how an immutable EngineImage becomes a live,
mutable SQLite handle and how that handle becomes an image again. Two
interchangeable strategies implement it:

- memory: the image is adopted into engine-owned memory (deserialize) and
  captured with serialize. Nothing touches the disk.
- tempfile: the image is written to a private temporary file that the handle
  opens; capture reads the file back after the connection is closed.

Both honour the same contract, so every operation built on top of the port is
tested once against both.

References:
    - SQLite C API: sqlite3_deserialize, sqlite3_serialize
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol

from sqlite_value.domain.entities import Handle
from sqlite_value.domain.value_objects import EngineImage


class ImageBridge(Protocol):
    """Protocol for turning images into handles and back.

    Every handle a bridge hands out is private to one call. Callers must end
    each handle's life with capture() or discard() (or close_persistent() for
    handles from open_persistent()).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short strategy name, used in logs and metrics."""
        ...

    @abstractmethod
    def new_handle(self) -> Handle:
        """Open a fresh, empty database.

        Raises:
            EngineOpenError: If SQLite cannot open a new database.
        """
        ...

    @abstractmethod
    def materialize(self, image: EngineImage, read_only: bool = False) -> Handle:
        """Open a private database whose sole content is `image`.

        Args:
            image: The image to load. It is never modified.
            read_only: Open with query_only set so writes are refused.

        Returns:
            A live handle owning its own copy of the image.

        Raises:
            EngineOpenError: If SQLite rejects the image.
            AllocationError: If the engine cannot allocate room for it.
        """
        ...

    @abstractmethod
    def capture(self, handle: Handle) -> EngineImage:
        """Snapshot the handle's main database into a new image and close it.

        Always a full image; there is no incremental form.

        Raises:
            CaptureError: If SQLite cannot serialize the database.
        """
        ...

    @abstractmethod
    def discard(self, handle: Handle) -> None:
        """Close a handle without capturing it. Safe to call twice."""
        ...

    @abstractmethod
    def open_persistent(
        self,
        path: str | Path,
        create: bool = True,
        busy_timeout: float = 5.0,
        verify: bool = True,
    ) -> Handle:
        """Open a handle bound to a database file.

        SQLite does its own file I/O here, so no ownership transfer happens.

        Args:
            path: Database file path.
            create: If False the file must already exist.
            busy_timeout: Seconds SQLite waits on a locked file before
                reporting SQLITE_BUSY. Zero reports contention immediately.
            verify: Read the schema at open time so a file that is not a
                database fails here. A destination that is only written by
                a backup is opened without it.

        Raises:
            EngineOpenError: If the file cannot be opened.
        """
        ...

    @abstractmethod
    def close_persistent(self, handle: Handle) -> None:
        """Commit and close a file-backed handle."""
        ...
