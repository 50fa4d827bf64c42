"""Temp-file ImageBridge: the image is parked on disk for each call.

Materialize writes the image to a private temporary file and opens it;
capture closes the connection and reads the file back verbatim. The file is
removed when the handle is captured or discarded.

Functionally equivalent to the memory strategy. It trades an extra write and
read of the image for never holding a second in-memory copy of it. A script
may switch its database to WAL mode; capture switches it back so the image
still opens under the memory strategy.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from sqlite_value.adapters.outbound.sqlite_bridge import SqliteBridgeBase
from sqlite_value.domain.entities import Handle
from sqlite_value.domain.exceptions import CaptureError
from sqlite_value.domain.value_objects import EngineImage
from sqlite_value.infrastructure.logging import get_logger

logger = get_logger(__name__)


class TempFileImageBridge(SqliteBridgeBase):
    """ImageBridge whose handles are backed by private temporary files."""

    name = "tempfile"

    def __init__(self, temp_dir: str | Path | None = None) -> None:
        """Initialize the bridge.

        Args:
            temp_dir: Directory for handle files. Uses the system temp
                directory if None.
        """
        self._temp_dir = Path(temp_dir) if temp_dir is not None else None

    @property
    def temp_dir(self) -> Path | None:
        return self._temp_dir

    def new_handle(self) -> Handle:
        """Open a fresh, empty database in a new temporary file."""
        return self._open_temp_file(EngineImage(b""))

    def materialize(self, image: EngineImage, read_only: bool = False) -> Handle:
        """Write `image` to a temporary file and open it."""
        handle = self._open_temp_file(image)
        self._prepare(handle, read_only)
        logger.debug(
            "image_materialized", strategy=self.name, size=len(image), read_only=read_only
        )
        return handle

    def capture(self, handle: Handle) -> EngineImage:
        """Close the handle's connection and read its file back as an image.

        Handles from open_persistent() belong to the caller's file, which is
        left in place; they are captured with the serializer instead.
        """
        if not handle.transient:
            return self._serialize(handle)

        try:
            connection = handle.ensure_open()
            if connection.in_transaction:
                connection.commit()
            self._leave_wal(connection)
            self._ensure_first_page(connection)
            connection.close()
            image = EngineImage.from_file(handle.path)
        except sqlite3.Error as e:
            raise CaptureError(f"Cannot flush the database file: {e}") from e
        except OSError as e:
            raise CaptureError(f"Cannot read back {handle.path}: {e}") from e
        finally:
            handle.close()

        logger.debug("image_captured", strategy=self.name, size=len(image))
        return image
