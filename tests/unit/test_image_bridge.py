"""Unit tests for the ImageBridge strategies."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from sqlite_value.adapters.outbound import (
    MemoryImageBridge,
    TempFileImageBridge,
    create_bridge,
)
from sqlite_value.domain.entities import HandleBacking
from sqlite_value.domain.exceptions import EngineOpenError
from sqlite_value.domain.value_objects import EngineImage
from sqlite_value.infrastructure.config import BridgeConfig
from sqlite_value.ports.outbound import ImageBridge


def _image_with_table(bridge: ImageBridge) -> EngineImage:
    handle = bridge.new_handle()
    handle.connection.executescript(
        "CREATE TABLE t(a INTEGER); INSERT INTO t VALUES (1), (2), (3)"
    )
    return bridge.capture(handle)


def _leftover_files(directory: Path) -> list[Path]:
    return list(directory.glob("sqlite_value_*"))


@pytest.mark.unit
class TestImageBridgeContract:
    """Behaviour shared by every strategy."""

    def test_new_handle_captures_to_valid_image(self, bridge: ImageBridge) -> None:
        image = bridge.capture(bridge.new_handle())

        assert image.has_sqlite_header
        assert len(image) > 0

    def test_capture_closes_handle(self, bridge: ImageBridge) -> None:
        handle = bridge.new_handle()
        bridge.capture(handle)

        assert handle.closed
        with pytest.raises(RuntimeError):
            handle.ensure_open()

    def test_materialize_exposes_image_content(self, bridge: ImageBridge) -> None:
        image = _image_with_table(bridge)

        handle = bridge.materialize(image)
        try:
            rows = handle.connection.execute("SELECT a FROM t ORDER BY a").fetchall()
        finally:
            bridge.discard(handle)

        assert rows == [(1,), (2,), (3,)]

    def test_round_trip_is_byte_identical(self, bridge: ImageBridge) -> None:
        image = _image_with_table(bridge)
        assert bridge.capture(bridge.materialize(image)) == image

    def test_writes_do_not_touch_input_image(self, bridge: ImageBridge) -> None:
        image = _image_with_table(bridge)
        original = bytes(image)

        handle = bridge.materialize(image)
        handle.connection.execute("DELETE FROM t")
        changed = bridge.capture(handle)

        assert bytes(image) == original
        assert changed != image

    def test_empty_image_is_empty_database(self, bridge: ImageBridge) -> None:
        handle = bridge.materialize(EngineImage(b""))
        try:
            tables = handle.connection.execute("SELECT name FROM sqlite_master").fetchall()
        finally:
            bridge.discard(handle)

        assert tables == []

    def test_malformed_image_raises_engine_open_error(self, bridge: ImageBridge) -> None:
        with pytest.raises(EngineOpenError):
            bridge.materialize(EngineImage(b"this is not a database" * 200))

    def test_read_only_handle_refuses_writes(self, bridge: ImageBridge) -> None:
        image = _image_with_table(bridge)

        handle = bridge.materialize(image, read_only=True)
        try:
            assert handle.read_only
            with pytest.raises(sqlite3.OperationalError):
                handle.connection.execute("DELETE FROM t")
        finally:
            bridge.discard(handle)

    def test_discard_is_idempotent(self, bridge: ImageBridge) -> None:
        handle = bridge.new_handle()
        bridge.discard(handle)
        bridge.discard(handle)
        assert handle.closed

    def test_open_persistent_creates_file(self, bridge: ImageBridge, temp_dir: Path) -> None:
        path = temp_dir / "persistent.db"

        handle = bridge.open_persistent(path)
        handle.connection.execute("CREATE TABLE p(x)")
        bridge.close_persistent(handle)

        assert handle.backing is HandleBacking.FILE
        assert path.exists()
        conn = sqlite3.connect(path)
        try:
            assert conn.execute("SELECT name FROM sqlite_master").fetchall() == [("p",)]
        finally:
            conn.close()

    def test_open_persistent_without_create_needs_file(
        self, bridge: ImageBridge, temp_dir: Path
    ) -> None:
        missing = temp_dir / "missing.db"

        with pytest.raises(EngineOpenError):
            bridge.open_persistent(missing, create=False)
        assert not missing.exists()

    def test_open_persistent_rejects_non_database(
        self, bridge: ImageBridge, temp_dir: Path
    ) -> None:
        path = temp_dir / "garbage.db"
        path.write_bytes(b"garbage" * 1000)

        with pytest.raises(EngineOpenError):
            bridge.open_persistent(path, create=False)

    def test_capture_of_persistent_handle_keeps_file(
        self, bridge: ImageBridge, temp_dir: Path
    ) -> None:
        path = temp_dir / "kept.db"
        image = _image_with_table(bridge)
        image.write_to(path)

        captured = bridge.capture(bridge.open_persistent(path, create=False))

        assert path.exists()
        assert captured == image

    def test_never_written_handle_captures_whole_header_page(self, bridge: ImageBridge) -> None:
        """A database with no pages yet is given page 1 before it is captured."""
        image = bridge.capture(bridge.new_handle())
        page_size = int.from_bytes(image.data[16:18], "big")

        assert len(image) == page_size
        handle = MemoryImageBridge().materialize(image)
        try:
            assert handle.connection.execute("PRAGMA page_count").fetchone() == (1,)
        finally:
            handle.close()

    def test_capture_of_new_persistent_file(self, bridge: ImageBridge, temp_dir: Path) -> None:
        captured = bridge.capture(bridge.open_persistent(temp_dir / "fresh.db"))

        assert captured.has_sqlite_header

    def test_wal_mode_capture_is_rollback_image(self, bridge: ImageBridge) -> None:
        handle = bridge.new_handle()
        handle.connection.executescript(
            "PRAGMA journal_mode=WAL; CREATE TABLE w(x); INSERT INTO w VALUES (1), (2)"
        )
        image = bridge.capture(handle)

        assert image.data[18:20] == b"\x01\x01"
        loaded = MemoryImageBridge().materialize(image, read_only=True)
        try:
            assert loaded.connection.execute("SELECT count(*) FROM w").fetchone() == (2,)
        finally:
            loaded.close()

    def test_capture_of_wal_file_reads_uncheckpointed_rows(
        self, bridge: ImageBridge, temp_dir: Path
    ) -> None:
        path = temp_dir / "wal.db"
        writer = sqlite3.connect(path, isolation_level=None)
        try:
            writer.execute("CREATE TABLE w(x)")
            assert writer.execute("PRAGMA journal_mode=WAL").fetchone() == ("wal",)
            writer.execute("INSERT INTO w VALUES (1), (2), (3)")
            before = path.read_bytes()

            captured = bridge.capture(bridge.open_persistent(path, create=False))

            assert path.read_bytes() == before
        finally:
            writer.close()

        assert captured.data[18:20] == b"\x01\x01"
        loaded = MemoryImageBridge().materialize(captured, read_only=True)
        try:
            assert loaded.connection.execute("SELECT count(*) FROM w").fetchone() == (3,)
        finally:
            loaded.close()
        assert _leftover_files(temp_dir) == []


@pytest.mark.unit
class TestMemoryImageBridge:
    """Tests specific to the in-memory strategy."""

    def test_handles_are_memory_backed(self) -> None:
        bridge = MemoryImageBridge()
        handle = bridge.materialize(_image_with_table(bridge))
        try:
            assert handle.backing is HandleBacking.MEMORY
            assert handle.path is None
        finally:
            bridge.discard(handle)

    def test_adopted_database_can_grow(self) -> None:
        """The adopted region is resizeable: inserts past its size succeed."""
        bridge = MemoryImageBridge()
        image = _image_with_table(bridge)

        handle = bridge.materialize(image)
        handle.connection.execute("INSERT INTO t VALUES (randomblob(20000))")
        grown = bridge.capture(handle)

        assert len(grown) > len(image)


@pytest.mark.unit
class TestTempFileImageBridge:
    """Tests specific to the temp-file strategy."""

    def test_files_live_in_configured_directory(self, temp_dir: Path) -> None:
        bridge = TempFileImageBridge(temp_dir=temp_dir)
        handle = bridge.new_handle()

        assert handle.backing is HandleBacking.FILE
        assert handle.path is not None
        assert handle.path.parent == temp_dir
        bridge.discard(handle)

    def test_capture_removes_file(self, temp_dir: Path) -> None:
        bridge = TempFileImageBridge(temp_dir=temp_dir)
        handle = bridge.materialize(_image_with_table(bridge))
        path = handle.path

        bridge.capture(handle)

        assert path is not None and not path.exists()
        assert _leftover_files(temp_dir) == []

    def test_discard_removes_file(self, temp_dir: Path) -> None:
        bridge = TempFileImageBridge(temp_dir=temp_dir)
        handle = bridge.materialize(_image_with_table(bridge), read_only=True)

        bridge.discard(handle)

        assert _leftover_files(temp_dir) == []

    def test_failed_open_removes_file(self, temp_dir: Path) -> None:
        bridge = TempFileImageBridge(temp_dir=temp_dir)

        with pytest.raises(EngineOpenError):
            bridge.materialize(EngineImage(b"not a database" * 300))

        assert _leftover_files(temp_dir) == []

    def test_image_written_verbatim(self, temp_dir: Path) -> None:
        bridge = TempFileImageBridge(temp_dir=temp_dir)
        image = _image_with_table(bridge)

        handle = bridge.materialize(image)
        try:
            assert handle.path is not None
            assert handle.path.read_bytes() == image.data
        finally:
            bridge.discard(handle)

    def test_wal_capture_removes_side_files(self, temp_dir: Path) -> None:
        bridge = TempFileImageBridge(temp_dir=temp_dir)
        handle = bridge.new_handle()
        handle.connection.executescript("PRAGMA journal_mode=WAL; CREATE TABLE w(x)")

        bridge.capture(handle)

        assert _leftover_files(temp_dir) == []


@pytest.mark.unit
class TestCreateBridge:
    """Tests for strategy selection."""

    def test_memory_strategy(self) -> None:
        bridge = create_bridge(BridgeConfig(strategy="memory"))
        assert isinstance(bridge, MemoryImageBridge)
        assert bridge.name == "memory"

    def test_tempfile_strategy(self, temp_dir: Path) -> None:
        bridge = create_bridge(BridgeConfig(strategy="tempfile", temp_dir=temp_dir))
        assert isinstance(bridge, TempFileImageBridge)
        assert bridge.name == "tempfile"
        assert bridge.temp_dir == temp_dir

    def test_unknown_strategy_rejected_by_config(self) -> None:
        with pytest.raises(ValueError):
            BridgeConfig(strategy="mmap")  # type: ignore[arg-type]
