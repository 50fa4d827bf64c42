"""Execution Adapter: statement batches and queries composed from the bridge.

Every operation is one self-contained session against a private SQLite
instance:

    materialize (or open fresh) -> one unit of work -> capture or discard

Writes (init, execute, vacuum) always capture a brand-new image; the input
image is never modified, and a failing statement produces no image at all, so
the caller keeps the image it had.

Reads (query, list_tables, schema, count_rows) open their handle with
query_only set and discard it afterwards. A mutating statement sent through
query() is refused by SQLite with "attempt to write a readonly database"
instead of running and being silently thrown away; mutations belong in
execute().

Usage:
    from sqlite_value.adapters.outbound import MemoryImageBridge
    from sqlite_value.application import ExecutionAdapter

    adapter = ExecutionAdapter(MemoryImageBridge())
    image = adapter.init("CREATE TABLE t(a INTEGER, b TEXT)")
    image = adapter.execute(image, "INSERT INTO t VALUES (1, 'x')")
    rows = adapter.query(image, "SELECT a, b FROM t")
"""

from __future__ import annotations

import sqlite3
from typing import Any, Sequence, Union

from sqlite_value.application.instrumentation import observe_operation
from sqlite_value.domain.entities import Handle
from sqlite_value.domain.exceptions import StatementError
from sqlite_value.domain.services import project_row, validate_identifier
from sqlite_value.domain.value_objects import EngineImage, Row
from sqlite_value.infrastructure.logging import get_logger
from sqlite_value.infrastructure.metrics import MetricsRegistry, get_metrics
from sqlite_value.ports.outbound import ImageBridge

logger = get_logger(__name__)

Script = Union[str, Sequence[str]]

# Primary result code for writes refused on a query_only handle.
SQLITE_READONLY = 8

LIST_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type='table'"
SCHEMA_SQL = "SELECT sql FROM sqlite_master WHERE sql IS NOT NULL"
VACUUM_SQL = "VACUUM"


def join_script(script: Script) -> str:
    """Turn a script or a sequence of statements into one batch."""
    if isinstance(script, str):
        return script
    return ";\n".join(script)


class ExecutionAdapter:
    """Runs SQL against images, one private engine instance per call.

    Thread Safety:
        Stateless apart from its collaborators. Concurrent calls never share
        a handle, so instances can be shared freely between threads.
    """

    def __init__(
        self,
        bridge: ImageBridge,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            bridge: Strategy used to materialize and capture images.
            metrics: Metrics registry (global registry if None).
        """
        self._bridge = bridge
        self._metrics = metrics or get_metrics()

    @property
    def bridge(self) -> ImageBridge:
        return self._bridge

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_empty(self) -> EngineImage:
        """Return the canonical image of an empty database."""
        with observe_operation(self._metrics, "create_empty", self._attributes()):
            handle = self._bridge.new_handle()
            return self._captured("create_empty", handle)

    def init(self, script: Script) -> EngineImage:
        """Create a database by running `script` against an empty one.

        Raises:
            StatementError: If any statement fails.
        """
        sql = join_script(script)
        with observe_operation(self._metrics, "init", self._attributes()):
            handle = self._bridge.new_handle()
            self._run_script(handle, sql)
            return self._captured("init", handle)

    def execute(self, image: EngineImage, script: Script) -> EngineImage:
        """Run a statement batch against `image` and return the new image.

        Statements run in order; the first failure aborts the rest of the
        batch and the whole call.

        Args:
            image: Image to start from. Never modified.
            script: SQL text, or a sequence of statements run as one batch.

        Returns:
            A new image holding the result of the batch.

        Raises:
            EngineOpenError: If the image cannot be opened.
            StatementError: If any statement fails.
        """
        sql = join_script(script)
        with observe_operation(self._metrics, "execute", self._attributes(image)):
            handle = self._bridge.materialize(image)
            self._run_script(handle, sql)
            return self._captured("execute", handle)

    def vacuum(self, image: EngineImage) -> EngineImage:
        """Rebuild the database into a minimal image."""
        return self.execute(image, VACUUM_SQL)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(self, image: EngineImage, statement: str) -> list[Row]:
        """Run one read-only statement and return every result row.

        The statement is prepared once and stepped to completion; rows are
        fully materialized before the handle is discarded, since the handle
        cannot outlive the call.

        Raises:
            EngineOpenError: If the image cannot be opened.
            StatementError: If the statement fails, holds more than one
                statement, or tries to modify the database.
        """
        with observe_operation(self._metrics, "query", self._attributes(image)):
            handle = self._bridge.materialize(image, read_only=True)
            try:
                rows = [project_row(values) for values in self._run_query(handle, statement)]
            finally:
                self._bridge.discard(handle)

        self._metrics.rows_returned_total.inc(len(rows))
        return rows

    def list_tables(self, image: EngineImage) -> list[str]:
        """Return the names of all tables in the image."""
        return self._first_column("list_tables", image, LIST_TABLES_SQL)

    def schema(self, image: EngineImage) -> list[str]:
        """Return the CREATE statements of every schema object in the image."""
        return self._first_column("schema", image, SCHEMA_SQL)

    def count_rows(self, image: EngineImage, table_name: str) -> int:
        """Count the rows of one table.

        The name is checked against the identifier allow-list before any
        handle is opened or statement built.

        Raises:
            InvalidIdentifierError: If `table_name` fails the allow-list.
            StatementError: If the table does not exist.
        """
        with observe_operation(self._metrics, "count_rows", self._attributes(image)):
            table = validate_identifier(table_name)
            handle = self._bridge.materialize(image, read_only=True)
            try:
                (count,) = self._run_query(handle, f"SELECT COUNT(*) FROM {table}")[0]
            finally:
                self._bridge.discard(handle)
            return count

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _first_column(self, operation: str, image: EngineImage, sql: str) -> list[str]:
        with observe_operation(self._metrics, operation, self._attributes(image)):
            handle = self._bridge.materialize(image, read_only=True)
            try:
                return [values[0] for values in self._run_query(handle, sql)]
            finally:
                self._bridge.discard(handle)

    def _run_script(self, handle: Handle, sql: str) -> None:
        """Execute a batch, discarding the handle if any statement fails."""
        try:
            handle.ensure_open().executescript(sql)
        except (sqlite3.Error, sqlite3.Warning, ValueError) as e:
            self._bridge.discard(handle)
            raise StatementError(f"Statement failed: {e}", statement=sql) from e
        logger.debug("script_executed", strategy=self._bridge.name, script=sql)

    def _run_query(self, handle: Handle, statement: str) -> list[tuple[Any, ...]]:
        """Prepare `statement` once and step it to completion."""
        try:
            cursor = handle.ensure_open().execute(statement)
            return cursor.fetchall()
        except sqlite3.Error as e:
            if getattr(e, "sqlite_errorcode", 0) & 0xFF == SQLITE_READONLY:
                raise StatementError(
                    "query() is read-only; run statements that modify the "
                    f"database through execute(): {e}",
                    statement=statement,
                ) from e
            raise StatementError(f"Query failed: {e}", statement=statement) from e
        except (sqlite3.Warning, ValueError) as e:
            raise StatementError(f"Query failed: {e}", statement=statement) from e

    def _captured(self, operation: str, handle: Handle) -> EngineImage:
        image = self._bridge.capture(handle)
        self._metrics.image_bytes.labels(operation=operation).observe(len(image))
        return image

    def _attributes(self, image: EngineImage | None = None) -> dict[str, Any]:
        attributes: dict[str, Any] = {"bridge.strategy": self._bridge.name}
        if image is not None:
            attributes["image.size"] = len(image)
        return attributes
