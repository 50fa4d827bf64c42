"""Domain services for the SQLite value bridge.

Exports:
    Value projection:
        - project_value, project_row: sqlite3 values -> Cell / Row
        - as_text, as_integer, as_real, as_blob: strict cell accessors

    Identifier guard:
        - is_valid_identifier, validate_identifier: table-name allow-list
"""

from sqlite_value.domain.services.identifier_guard import (
    is_valid_identifier,
    validate_identifier,
)
from sqlite_value.domain.services.value_projector import (
    as_blob,
    as_integer,
    as_real,
    as_text,
    project_row,
    project_value,
)

__all__ = [
    "project_value",
    "project_row",
    "as_text",
    "as_integer",
    "as_real",
    "as_blob",
    "is_valid_identifier",
    "validate_identifier",
]
