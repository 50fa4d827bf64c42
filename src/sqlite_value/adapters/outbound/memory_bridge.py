"""In-memory ImageBridge: deserialize in, serialize out.

Ownership rule:
    SQLite keeps the right to grow, shrink and free the buffer that backs a
    deserialized database. That buffer must therefore come from SQLite's own
    allocator; handing it memory owned by anything else would have SQLite
    later free memory it never allocated. The adopt step below is the only
    place an image crosses into the engine, and it always goes through
    Connection.deserialize, which:

        1. allocates a new region with sqlite3_malloc64,
        2. copies the image bytes into it,
        3. passes the region to sqlite3_deserialize with
           SQLITE_DESERIALIZE_FREEONCLOSE | SQLITE_DESERIALIZE_RESIZEABLE
           (owned by SQLite, not read-only, growable in place).

    The host's `bytes` object is only ever read. Capture goes the other way:
    Connection.serialize copies the engine's pages into a new host-owned
    `bytes` object before the connection (and the engine's region) goes away.

Round trip:
    For an image produced by capture, capture(materialize(image)) is
    byte-identical: the memdb serializer returns the adopted buffer verbatim
    when nothing was written.
"""

from __future__ import annotations

import sqlite3

from sqlite_value.adapters.outbound.sqlite_bridge import SqliteBridgeBase
from sqlite_value.domain.entities import Handle, HandleBacking
from sqlite_value.domain.exceptions import AllocationError, EngineOpenError
from sqlite_value.domain.value_objects import EngineImage
from sqlite_value.infrastructure.logging import get_logger

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"


class MemoryImageBridge(SqliteBridgeBase):
    """ImageBridge whose handles live entirely in SQLite-owned memory."""

    name = "memory"

    def new_handle(self) -> Handle:
        """Open a fresh, empty in-memory database."""
        connection = self._connect(MEMORY_DATABASE)
        return Handle(connection=connection, backing=HandleBacking.MEMORY)

    def materialize(self, image: EngineImage, read_only: bool = False) -> Handle:
        """Adopt `image` into a new in-memory database.

        A zero-length image is an empty database, the same as a zero-length
        database file.
        """
        handle = self.new_handle()
        if not image.is_empty:
            try:
                self._adopt(handle.connection, image)
            except BaseException:
                handle.close()
                raise
        self._prepare(handle, read_only)
        logger.debug(
            "image_materialized", strategy=self.name, size=len(image), read_only=read_only
        )
        return handle

    def capture(self, handle: Handle) -> EngineImage:
        """Serialize the main database into a new image and close the handle."""
        return self._serialize(handle)

    @staticmethod
    def _adopt(connection: sqlite3.Connection, image: EngineImage) -> None:
        """Copy `image` into SQLite's allocator and transfer ownership.

        Precondition: `connection` is a fresh in-memory connection with no
        open statements or transactions; its main database is replaced.
        Postcondition: SQLite owns a private, resizeable copy of the image;
        the caller's buffer is untouched and not referenced.

        Raises:
            AllocationError: If SQLite cannot allocate the region.
            EngineOpenError: If SQLite refuses the image.
        """
        try:
            connection.deserialize(image.data, name="main")
        except (MemoryError, OverflowError) as e:
            raise AllocationError(
                f"Cannot allocate {len(image)} bytes for the database image"
            ) from e
        except sqlite3.Error as e:
            raise EngineOpenError(f"SQLite rejected the database image: {e}") from e
