"""Unit tests for the identifier allow-list."""

from __future__ import annotations

import pytest

from sqlite_value.domain.exceptions import InvalidIdentifierError, SqliteValueError
from sqlite_value.domain.services import is_valid_identifier, validate_identifier


@pytest.mark.unit
class TestIdentifierGuard:
    """Tests for is_valid_identifier / validate_identifier."""

    @pytest.mark.parametrize("name", ["t", "users", "Order_Items", "_x", "t2", "table_1"])
    def test_accepts_plain_names(self, name: str) -> None:
        assert is_valid_identifier(name)
        assert validate_identifier(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "a; DROP TABLE x", "t--", "t t", "t.x", '"t"', "t'", "t)", "t\n"],
    )
    def test_rejects_everything_else(self, name: str) -> None:
        assert not is_valid_identifier(name)
        with pytest.raises(InvalidIdentifierError) as exc_info:
            validate_identifier(name)
        assert exc_info.value.identifier == name

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_identifier("a;b")
        with pytest.raises(SqliteValueError):
            validate_identifier("a;b")

    def test_rejects_non_strings(self) -> None:
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(None)  # type: ignore[arg-type]
