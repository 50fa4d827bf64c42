"""Value projector: SQLite values in, tagged cells out, and back again.

Projection is exhaustive over SQLite's five storage classes. The inverse
accessors are strict: each one returns a value only when the addressed cell
carries exactly the requested tag. Asking for an INTEGER from a REAL cell
yields None rather than a conversion, so numeric round trips stay exact.

Accessors take a Row, a JSON-decoded row (a list, as the host stores it) or
the row's JSON text, so rows can be read back after travelling through the
host. Text that is not a JSON array addresses no cells.
"""

from __future__ import annotations

import json
from typing import Any, Sequence, Union

from sqlite_value.domain.value_objects import Cell, CellType, CellValue, Row

RowInput = Union[Row, Sequence[Any], str, bytes, bytearray]


def project_value(value: Any) -> Cell:
    """Project one value as returned by sqlite3 into a Cell.

    Raises:
        TypeError: If the value is not one of SQLite's storage classes.
    """
    if value is None:
        return Cell.null()
    if isinstance(value, bool):
        raise TypeError("bool is not a SQLite storage class")
    if isinstance(value, int):
        return Cell.integer(value)
    if isinstance(value, float):
        return Cell.real(value)
    if isinstance(value, str):
        return Cell.text(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Cell.blob(value)
    raise TypeError(f"Unsupported SQLite value type: {type(value).__name__}")


def project_row(values: Sequence[Any]) -> Row:
    """Project one result tuple into a Row, preserving column order."""
    return Row(tuple(project_value(v) for v in values))


def _cell_at(row: RowInput, index: int) -> Cell | None:
    if index < 0:
        return None
    if isinstance(row, (str, bytes, bytearray)):
        try:
            row = json.loads(row)
        except ValueError:
            return None
        if not isinstance(row, list):
            return None
    if isinstance(row, Row):
        return row.cells[index] if index < len(row) else None
    if index >= len(row):
        return None
    try:
        return Cell.from_json_value(row[index])
    except (ValueError, OverflowError):
        return None


def _typed(row: RowInput, index: int, expected: CellType) -> CellValue:
    cell = _cell_at(row, index)
    if cell is None or cell.type is not expected:
        return None
    return cell.value


def as_text(row: RowInput, index: int) -> str | None:
    """Return the TEXT value at `index`, or None for any other cell."""
    return _typed(row, index, CellType.TEXT)


def as_integer(row: RowInput, index: int) -> int | None:
    """Return the INTEGER value at `index`, or None for any other cell."""
    return _typed(row, index, CellType.INTEGER)


def as_real(row: RowInput, index: int) -> float | None:
    """Return the REAL value at `index`, or None for any other cell."""
    return _typed(row, index, CellType.REAL)


def as_blob(row: RowInput, index: int) -> bytes | None:
    """Return the BLOB value at `index`, or None for any other cell."""
    return _typed(row, index, CellType.BLOB)
