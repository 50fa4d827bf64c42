"""Value objects for the SQLite value bridge.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Images:
        - EngineImage: Opaque SQLite database image
        - SQLITE_HEADER_MAGIC: Header string every SQLite image starts with

    Results:
        - CellType: SQLite storage classes (NULL, INTEGER, REAL, TEXT, BLOB)
        - Cell: One tagged result value
        - Row: Ordered cells of one result tuple, with JSON interchange
"""

from sqlite_value.domain.value_objects.cell import (
    Cell,
    CellType,
    CellValue,
    INT64_MAX,
    INT64_MIN,
    Row,
)
from sqlite_value.domain.value_objects.engine_image import (
    SQLITE_HEADER_MAGIC,
    EngineImage,
)

__all__ = [
    # Images
    "EngineImage",
    "SQLITE_HEADER_MAGIC",
    # Results
    "Cell",
    "CellType",
    "CellValue",
    "Row",
    "INT64_MIN",
    "INT64_MAX",
]
