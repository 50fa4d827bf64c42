"""Host entry points.

One plain function per operation the host exposes. Each takes and returns
values only (images, rows, names, counts); handles never leave this module.
Components come from the process-wide container, configured from the
SQLITE_VALUE_* environment.

Usage:
    from sqlite_value import api

    image = api.init_image("CREATE TABLE t(a INTEGER, b TEXT)")
    image = api.execute(image, ["INSERT INTO t VALUES (1, 'x')"])
    for row in api.query(image, "SELECT a, b FROM t"):
        print(api.get_integer(row, 0), api.get_text(row, 1))
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence, Union

from sqlite_value.application.execution_adapter import Script
from sqlite_value.domain.services import as_blob, as_integer, as_real, as_text
from sqlite_value.domain.value_objects import EngineImage, Row
from sqlite_value.infrastructure.container import get_container

RowLike = Union[Row, Sequence[Any], str, bytes]


def create_empty() -> EngineImage:
    """Return the image of an empty database."""
    return get_container().adapter.create_empty()


def init_image(script: Script) -> EngineImage:
    """Build a new image by running `script` against an empty database."""
    return get_container().adapter.init(script)


def import_image(path: str | Path) -> EngineImage:
    """Read an existing database file into an image."""
    return get_container().copier.import_image(path)


def export_image(image: EngineImage, path: str | Path) -> bool:
    """Back up `image` into the database file at `path`."""
    return get_container().copier.export(image, path)


def execute(image: EngineImage, script: Script) -> EngineImage:
    return get_container().adapter.execute(image, script)


def vacuum(image: EngineImage) -> EngineImage:
    return get_container().adapter.vacuum(image)


def query(image: EngineImage, statement: str) -> list[Row]:
    return get_container().adapter.query(image, statement)


def list_tables(image: EngineImage) -> list[str]:
    return get_container().adapter.list_tables(image)


def schema(image: EngineImage) -> list[str]:
    return get_container().adapter.schema(image)


def count_rows(image: EngineImage, table_name: str) -> int:
    return get_container().adapter.count_rows(image, table_name)


def get_text(row: RowLike, index: int) -> str | None:
    return as_text(row, index)


def get_integer(row: RowLike, index: int) -> int | None:
    return as_integer(row, index)


def get_real(row: RowLike, index: int) -> float | None:
    return as_real(row, index)


def get_blob(row: RowLike, index: int) -> bytes | None:
    return as_blob(row, index)
