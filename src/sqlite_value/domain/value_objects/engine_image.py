"""The EngineImage value object.

An EngineImage is the opaque, host-owned byte image of a complete SQLite
database (schema + data) in SQLite's native file format. It is byte-for-byte
what the sqlite3 command line tool would read from a database file. Nothing in
this package reinterprets or transcodes it; the only operations are
"materialize into a live handle" and "write to persistent storage".
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Every SQLite database file starts with this 16-byte header string.
SQLITE_HEADER_MAGIC = b"SQLite format 3\x00"


@dataclass(frozen=True, slots=True)
class EngineImage:
    """Immutable SQLite database image.

    Attributes:
        data: The serialized database pages.

    Example:
        >>> image = EngineImage(b"SQLite format 3\\x00" + b"\\x00" * 4080)
        >>> len(image)
        4096
    """

    data: bytes

    def __post_init__(self) -> None:
        """Take a private copy of mutable buffers so the image cannot change."""
        if isinstance(self.data, (bytearray, memoryview)):
            object.__setattr__(self, "data", bytes(self.data))
        elif not isinstance(self.data, bytes):
            raise TypeError(
                f"EngineImage data must be bytes-like, got {type(self.data).__name__}"
            )

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"EngineImage({len(self.data)} bytes)"

    @property
    def is_empty(self) -> bool:
        """True for a zero-length image (no pages at all)."""
        return len(self.data) == 0

    @property
    def has_sqlite_header(self) -> bool:
        """True if the image starts with the SQLite file header string.

        Informational only: the bridge leaves validation to SQLite itself.
        """
        return self.data[: len(SQLITE_HEADER_MAGIC)] == SQLITE_HEADER_MAGIC

    def write_to(self, path: str | Path) -> Path:
        """Write the image verbatim to a file and return its path."""
        target = Path(path)
        target.write_bytes(self.data)
        return target

    @classmethod
    def from_file(cls, path: str | Path) -> EngineImage:
        """Read a database file verbatim into an image."""
        return cls(Path(path).read_bytes())
