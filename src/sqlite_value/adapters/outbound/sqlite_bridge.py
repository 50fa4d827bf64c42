"""Shared plumbing for the sqlite3-backed ImageBridge strategies.

Both strategies open connections the same way, check new handles the same
way and treat file-backed handles identically; they differ only in where a
materialized image lives and how it is captured. That difference is left to
subclasses.

Connections are opened in autocommit mode (isolation_level=None) so the
driver never starts implicit transactions behind a script's back; any
transaction a script leaves open is committed at capture time.

Every captured image is in rollback-journal format (header bytes 18/19 set
to 1). An in-memory database cannot open a WAL-format image, so a database
in WAL mode is staged through a private file and switched back to
journal_mode=DELETE before it is serialized. The caller's file is never
modified.
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
from pathlib import Path

from sqlite_value.domain.entities import Handle, HandleBacking
from sqlite_value.domain.exceptions import AllocationError, CaptureError, EngineOpenError
from sqlite_value.domain.value_objects import EngineImage
from sqlite_value.infrastructure.logging import get_logger

logger = get_logger(__name__)

WAL_JOURNAL_MODE = "wal"


class SqliteBridgeBase:
    """Common behaviour of the memory and temp-file bridges."""

    name = "base"

    # Directory for private database files; system temp directory if None.
    _temp_dir: Path | None = None

    def materialize(self, image: EngineImage, read_only: bool = False) -> Handle:
        raise NotImplementedError

    def capture(self, handle: Handle) -> EngineImage:
        raise NotImplementedError

    def discard(self, handle: Handle) -> None:
        """Close a handle without capturing it."""
        handle.close()

    def open_persistent(
        self,
        path: str | Path,
        create: bool = True,
        busy_timeout: float = 5.0,
        verify: bool = True,
    ) -> Handle:
        """Open a handle bound to a database file.

        Args:
            path: Database file path.
            create: If False the file must already exist and is opened
                read-write without being created.
            busy_timeout: Seconds to wait on a locked file.
            verify: Read the schema at open time. Otherwise nothing
                touches the file until the first statement, so a lock held
                by another connection is not reported here.

        Raises:
            EngineOpenError: If the file cannot be opened or is not a database.
        """
        db_path = Path(path)
        try:
            if create:
                connection = sqlite3.connect(
                    db_path, timeout=busy_timeout, isolation_level=None
                )
            else:
                connection = sqlite3.connect(
                    f"{db_path.resolve().as_uri()}?mode=rw",
                    uri=True,
                    timeout=busy_timeout,
                    isolation_level=None,
                )
        except sqlite3.Error as e:
            raise EngineOpenError(f"Cannot open database file {db_path}: {e}") from e

        handle = Handle(connection=connection, backing=HandleBacking.FILE, path=db_path)
        if verify:
            self._prepare(handle, read_only=False)
        logger.debug("persistent_handle_opened", path=str(db_path), create=create)
        return handle

    def close_persistent(self, handle: Handle) -> None:
        """Commit any open transaction and close a file-backed handle."""
        try:
            connection = handle.ensure_open()
            if connection.in_transaction:
                connection.commit()
        finally:
            handle.close()

    def _serialize(self, handle: Handle) -> EngineImage:
        """Copy the handle's main database into a new image and close it.

        Works for any handle, memory or file backed; an open transaction is
        committed first so the image holds everything the handle wrote.
        """
        try:
            connection = handle.ensure_open()
            if connection.in_transaction:
                connection.commit()
            if self._journal_mode(connection) == WAL_JOURNAL_MODE:
                data = self._serialize_staged(connection)
            else:
                self._ensure_first_page(connection)
                data = connection.serialize(name="main")
        except MemoryError as e:
            raise AllocationError("Out of memory while serializing the database") from e
        except sqlite3.Error as e:
            raise CaptureError(f"Cannot serialize the database: {e}") from e
        finally:
            handle.close()

        logger.debug("image_captured", strategy=self.name, size=len(data))
        return EngineImage(data)

    def _serialize_staged(self, connection: sqlite3.Connection) -> bytes:
        """Serialize a WAL-mode database through a private rollback-mode copy.

        The online backup reads committed pages through the WAL, so frames
        not yet checkpointed are included. The copy keeps the WAL header
        bytes until journal_mode is switched on it.
        """
        staging = self._open_temp_file(EngineImage(b""))
        try:
            connection.backup(staging.connection)
            self._leave_wal(staging.connection)
            return staging.connection.serialize(name="main")
        finally:
            staging.close()

    def _open_temp_file(self, image: EngineImage) -> Handle:
        """Write `image` to a new private file and open it.

        The handle is transient: the file goes away with the handle.
        """
        try:
            fd, name = tempfile.mkstemp(
                prefix="sqlite_value_", suffix=".db", dir=self._temp_dir
            )
        except OSError as e:
            raise EngineOpenError(f"Cannot create a temporary database file: {e}") from e

        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(image.data)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise AllocationError(
                f"Cannot store {len(image)} bytes in {path}: {e}"
            ) from e

        try:
            connection = self._connect(path)
        except EngineOpenError:
            path.unlink(missing_ok=True)
            raise
        return Handle(
            connection=connection,
            backing=HandleBacking.FILE,
            path=path,
            transient=True,
        )

    def _connect(self, database: str | Path) -> sqlite3.Connection:
        """Open a connection for a handle the bridge owns."""
        try:
            return sqlite3.connect(database, isolation_level=None)
        except sqlite3.Error as e:
            raise EngineOpenError(f"Cannot open SQLite database: {e}") from e

    def _prepare(self, handle: Handle, read_only: bool) -> None:
        """Check a freshly opened handle and apply its access mode.

        Reading the schema cookie forces SQLite to parse page 1, so an image
        that is not a database fails here rather than on the first statement.
        The handle is closed when the check fails.
        """
        try:
            handle.connection.execute("PRAGMA schema_version").fetchone()
            if read_only:
                handle.connection.execute("PRAGMA query_only = ON")
                handle.read_only = True
        except sqlite3.Error as e:
            handle.close()
            raise EngineOpenError(f"Cannot open the database: {e}") from e

    @staticmethod
    def _journal_mode(connection: sqlite3.Connection) -> str:
        # The pager only switches to WAL once page 1 has been read.
        connection.execute("PRAGMA schema_version").fetchone()
        (mode,) = connection.execute("PRAGMA journal_mode").fetchone()
        return str(mode).lower()

    @classmethod
    def _leave_wal(cls, connection: sqlite3.Connection) -> None:
        """Checkpoint a WAL database and put it back in rollback-journal mode."""
        if cls._journal_mode(connection) == WAL_JOURNAL_MODE:
            connection.execute("PRAGMA journal_mode=DELETE").fetchone()

    @staticmethod
    def _ensure_first_page(connection: sqlite3.Connection) -> None:
        """Make sure a never-written database has its header page.

        A brand-new database has no pages at all until its first write
        transaction, and SQLite refuses to serialize it. An empty write
        transaction initialises page 1.
        """
        (page_count,) = connection.execute("PRAGMA page_count").fetchone()
        if page_count == 0 and not connection.execute("PRAGMA query_only").fetchone()[0]:
            connection.execute("BEGIN IMMEDIATE")
            connection.execute("COMMIT")
