"""Unit tests for the value projector and strict accessors."""

from __future__ import annotations

import pytest

from sqlite_value.domain.services import (
    as_blob,
    as_integer,
    as_real,
    as_text,
    project_row,
    project_value,
)
from sqlite_value.domain.value_objects import Cell, Row


@pytest.mark.unit
class TestProjection:
    """Tests for projecting sqlite3 values into cells."""

    def test_storage_classes(self) -> None:
        assert project_value(None) == Cell.null()
        assert project_value(42) == Cell.integer(42)
        assert project_value(4.5) == Cell.real(4.5)
        assert project_value("s") == Cell.text("s")
        assert project_value(b"\x00") == Cell.blob(b"\x00")
        assert project_value(memoryview(b"\x01")) == Cell.blob(b"\x01")

    @pytest.mark.parametrize("value", [True, object(), [1], 1j])
    def test_rejects_other_types(self, value: object) -> None:
        with pytest.raises(TypeError):
            project_value(value)

    def test_project_row_keeps_order(self) -> None:
        row = project_row((1, None, "x"))
        assert row == Row((Cell.integer(1), Cell.null(), Cell.text("x")))


@pytest.mark.unit
class TestAccessors:
    """Tests for the strict accessors."""

    @pytest.fixture
    def row(self) -> Row:
        return Row((Cell.real(2.5), Cell.integer(7), Cell.text("t"), Cell.blob(b"b"), Cell.null()))

    def test_matching_tags(self, row: Row) -> None:
        assert as_real(row, 0) == 2.5
        assert as_integer(row, 1) == 7
        assert as_text(row, 2) == "t"
        assert as_blob(row, 3) == b"b"

    def test_real_cell_is_not_an_integer(self, row: Row) -> None:
        assert as_integer(row, 0) is None
        assert as_real(row, 0) == 2.5

    def test_integer_cell_is_not_a_real(self, row: Row) -> None:
        assert as_real(row, 1) is None

    def test_mismatches_yield_none(self, row: Row) -> None:
        assert as_text(row, 1) is None
        assert as_blob(row, 2) is None
        assert as_text(row, 3) is None

    def test_null_cell_yields_none(self, row: Row) -> None:
        assert as_text(row, 4) is None
        assert as_integer(row, 4) is None

    @pytest.mark.parametrize("index", [-1, 5, 100])
    def test_out_of_range_yields_none(self, row: Row, index: int) -> None:
        assert as_text(row, index) is None
        assert as_integer(row, index) is None

    def test_json_decoded_rows(self, row: Row) -> None:
        """Rows read back from host storage work the same as Row objects."""
        stored = row.to_json_value()

        assert as_real(stored, 0) == 2.5
        assert as_integer(stored, 0) is None
        assert as_integer(stored, 1) == 7
        assert as_text(stored, 2) == "t"
        assert as_blob(stored, 3) == b"b"
        assert as_text(stored, 9) is None

    def test_undecodable_json_cell_yields_none(self) -> None:
        assert as_integer([True], 0) is None
        assert as_blob([[300]], 0) is None
        assert as_integer([2**63], 0) is None

    def test_json_text_rows(self, row: Row) -> None:
        """A row still in its stored JSON text form is decoded before indexing."""
        text = row.to_json()

        assert as_real(text, 0) == 2.5
        assert as_integer(text, 1) == 7
        assert as_text(text, 2) == "t"
        assert as_blob(text.encode(), 3) == b"b"
        assert as_text('[1,"x"]', 1) == "x"
        assert as_text('[1,"x"]', 0) is None

    @pytest.mark.parametrize("text", ["not json", '{"a": 1}', '"x"', "", b"\xff"])
    def test_json_text_that_is_not_an_array_yields_none(self, text: str | bytes) -> None:
        assert as_text(text, 0) is None
        assert as_integer(text, 0) is None
