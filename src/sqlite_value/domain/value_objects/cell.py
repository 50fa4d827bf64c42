"""Generic, host-neutral result values: Cell and Row.

A Cell mirrors SQLite's dynamic typing exactly: every value stored in a
SQLite column has one of five storage classes, and a Cell carries that
storage class as an explicit tag next to the value. No coercion happens at
this layer.

Rows travel to the host as JSON arrays, one element per column:

    NULL     -> null
    INTEGER  -> JSON integer
    REAL     -> JSON number with a fractional part (1.0, not 1)
    TEXT     -> JSON string
    BLOB     -> JSON array of byte values (0..255)

The encoding is lossless: Row.from_json(row.to_json()) == row.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Sequence, Union

CellValue = Union[None, int, float, str, bytes]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class CellType(Enum):
    """SQLite storage classes."""

    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


_PYTHON_TYPES: dict[CellType, type | tuple[type, ...]] = {
    CellType.NULL: type(None),
    CellType.INTEGER: int,
    CellType.REAL: float,
    CellType.TEXT: str,
    CellType.BLOB: bytes,
}


@dataclass(frozen=True, slots=True)
class Cell:
    """One tagged result value.

    Attributes:
        type: The SQLite storage class of the value.
        value: The value itself; its Python type always matches `type`.
    """

    type: CellType
    value: CellValue = None

    def __post_init__(self) -> None:
        expected = _PYTHON_TYPES[self.type]
        # bool is an int subclass but never comes out of SQLite
        if isinstance(self.value, bool) or not isinstance(self.value, expected):
            raise TypeError(
                f"{self.type.name} cell cannot hold {type(self.value).__name__}"
            )
        if self.type is CellType.INTEGER and not INT64_MIN <= self.value <= INT64_MAX:
            raise OverflowError(f"INTEGER cell out of 64-bit range: {self.value}")

    @classmethod
    def null(cls) -> Cell:
        return cls(CellType.NULL, None)

    @classmethod
    def integer(cls, value: int) -> Cell:
        return cls(CellType.INTEGER, value)

    @classmethod
    def real(cls, value: float) -> Cell:
        return cls(CellType.REAL, value)

    @classmethod
    def text(cls, value: str) -> Cell:
        return cls(CellType.TEXT, value)

    @classmethod
    def blob(cls, value: bytes | bytearray | memoryview) -> Cell:
        return cls(CellType.BLOB, bytes(value))

    @property
    def is_null(self) -> bool:
        return self.type is CellType.NULL

    def to_json_value(self) -> Any:
        """Encode the cell as a JSON-compatible Python value."""
        if self.type is CellType.BLOB:
            return list(self.value)
        return self.value

    @classmethod
    def from_json_value(cls, value: Any) -> Cell:
        """Decode a JSON-compatible value produced by to_json_value.

        Raises:
            ValueError: If the value is not one the encoding produces.
        """
        if value is None:
            return cls.null()
        if isinstance(value, bool):
            raise ValueError("Booleans are not part of the row encoding")
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.real(value)
        if isinstance(value, str):
            return cls.text(value)
        if isinstance(value, list):
            try:
                return cls.blob(bytes(value))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Blob arrays must hold byte values 0..255: {e}") from e
        raise ValueError(f"Cannot decode cell from {type(value).__name__}")

    def __repr__(self) -> str:
        if self.type is CellType.NULL:
            return "Cell(NULL)"
        return f"Cell({self.type.name}, {self.value!r})"


@dataclass(frozen=True, slots=True)
class Row:
    """An ordered, immutable sequence of cells, one per result column."""

    cells: tuple[Cell, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.cells, tuple):
            object.__setattr__(self, "cells", tuple(self.cells))

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def values(self) -> list[CellValue]:
        """Return the untagged Python values in column order."""
        return [cell.value for cell in self.cells]

    def to_json_value(self) -> list[Any]:
        return [cell.to_json_value() for cell in self.cells]

    def to_json(self) -> str:
        """Encode the row as a JSON array."""
        return json.dumps(self.to_json_value())

    @classmethod
    def from_json(cls, data: str | bytes | Sequence[Any]) -> Row:
        """Decode a row from JSON text or an already-parsed JSON array."""
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        if not isinstance(data, (list, tuple)):
            raise ValueError(f"A row must be a JSON array, got {type(data).__name__}")
        return cls(tuple(Cell.from_json_value(value) for value in data))

    def __repr__(self) -> str:
        return f"Row({', '.join(repr(c) for c in self.cells)})"
