"""Durability Copier: online backup of an image into a database file.

export() is the only operation that holds two live handles at once: the
source materialized from the image, and a destination bound to a file. Pages
move through SQLite's online backup API in fixed-size steps. A step that
cannot proceed because a page is locked (SQLITE_BUSY / SQLITE_LOCKED) is
retried after a fixed sleep, up to a fixed number of retries; the retry loop
never blocks indefinitely.

The destination is opened with a zero busy timeout so contention reaches the
retry policy here instead of being absorbed by SQLite's own busy handler.

import_image() is the reverse direction and needs no retries: it opens an
existing file, captures it, and closes it.

References:
    - SQLite online backup API: sqlite3_backup_step
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlite_value.application.instrumentation import observe_operation
from sqlite_value.domain.entities import Handle
from sqlite_value.domain.exceptions import BackupError, EngineOpenError
from sqlite_value.domain.value_objects import EngineImage
from sqlite_value.infrastructure.config import BackupConfig
from sqlite_value.infrastructure.logging import get_logger
from sqlite_value.infrastructure.metrics import MetricsRegistry, get_metrics
from sqlite_value.ports.outbound import ImageBridge

logger = get_logger(__name__)

# sqlite3_backup_step() result codes
SQLITE_OK = 0
SQLITE_BUSY = 5
SQLITE_LOCKED = 6
SQLITE_DONE = 101

LOCK_CONTENTION_CODES = frozenset({SQLITE_BUSY, SQLITE_LOCKED})


@dataclass(frozen=True)
class BackupPolicy:
    """Step size and retry bounds for one backup.

    Attributes:
        pages_per_step: Pages copied per sqlite3_backup_step call.
        retry_sleep_seconds: Sleep after a step that hit a locked page.
        max_retries: Locked steps retried before the backup is abandoned.
    """

    pages_per_step: int = 5
    retry_sleep_seconds: float = 0.25
    max_retries: int = 40

    def __post_init__(self) -> None:
        if self.pages_per_step < 1:
            raise ValueError(f"pages_per_step must be positive, got {self.pages_per_step}")
        if self.retry_sleep_seconds <= 0:
            raise ValueError(
                f"retry_sleep_seconds must be positive, got {self.retry_sleep_seconds}"
            )
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")

    @classmethod
    def from_config(cls, config: BackupConfig) -> BackupPolicy:
        return cls(
            pages_per_step=config.pages_per_step,
            retry_sleep_seconds=config.retry_sleep_seconds,
            max_retries=config.max_retries,
        )


@dataclass
class BackupProgress:
    """Running totals for one backup."""

    steps: int = 0
    retries: int = 0
    remaining: int = 0
    page_count: int = 0

    @property
    def complete(self) -> bool:
        return self.steps > 0 and self.remaining == 0


class RetryLimitExceeded(Exception):
    """Raised from the progress callback to stop a backup stuck on a lock."""


class DurabilityCopier:
    """Copies images to and from database files.

    Thread Safety:
        Each call uses private handles; the only blocking wait is the bounded
        retry sleep inside export().
    """

    def __init__(
        self,
        bridge: ImageBridge,
        policy: BackupPolicy | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the copier.

        Args:
            bridge: Strategy used to materialize the source image.
            policy: Backup step size and retry bounds.
            metrics: Metrics registry (global registry if None).
        """
        self._bridge = bridge
        self._policy = policy or BackupPolicy()
        self._metrics = metrics or get_metrics()

    @property
    def policy(self) -> BackupPolicy:
        return self._policy

    def export(self, image: EngineImage, destination: str | Path) -> bool:
        """Back up `image` into the database file at `destination`.

        Returns:
            True once every page is copied and the destination is closed;
            False if the retry limit was hit or the copy failed.

        Raises:
            EngineOpenError: If the image cannot be opened.
            BackupError: If the destination cannot be opened.
        """
        attributes: dict[str, Any] = {
            "bridge.strategy": self._bridge.name,
            "image.size": len(image),
            "backup.destination": str(destination),
        }
        with observe_operation(self._metrics, "export", attributes) as outcome:
            source = self._bridge.materialize(image)
            try:
                target = self._open_destination(destination)
                try:
                    progress = self.copy(source, target)
                except BackupError as e:
                    outcome.fail()
                    self._metrics.backups_total.labels(status="failure").inc()
                    logger.warning(
                        "backup_failed", destination=str(destination), reason=str(e)
                    )
                    return False
                finally:
                    self._bridge.close_persistent(target)
            finally:
                self._bridge.discard(source)

        self._metrics.backups_total.labels(status="success").inc()
        logger.info(
            "backup_completed",
            destination=str(destination),
            pages=progress.page_count,
            steps=progress.steps,
            retries=progress.retries,
        )
        return True

    def import_image(self, path: str | Path) -> EngineImage:
        """Read the database file at `path` into a new image.

        Raises:
            EngineOpenError: If the file is missing or not a database.
            CaptureError: If the database cannot be serialized.
        """
        with observe_operation(self._metrics, "import", {"import.path": str(path)}):
            handle = self._bridge.open_persistent(path, create=False)
            image = self._bridge.capture(handle)
            self._metrics.image_bytes.labels(operation="import").observe(len(image))
            return image

    def copy(self, source: Handle, destination: Handle) -> BackupProgress:
        """Copy every page of `source` into `destination`.

        Raises:
            BackupError: If the retry limit is exceeded or a step fails with
                anything other than lock contention.
        """
        progress = BackupProgress()
        policy = self._policy

        def on_step(status: int, remaining: int, total: int) -> None:
            progress.steps += 1
            progress.remaining = remaining
            progress.page_count = total
            if status in LOCK_CONTENTION_CODES:
                if progress.retries >= policy.max_retries:
                    raise RetryLimitExceeded(
                        f"page still locked after {progress.retries} retries"
                    )
                progress.retries += 1
                self._metrics.backup_retries_total.inc()
                logger.debug(
                    "backup_step_locked",
                    status=status,
                    retries=progress.retries,
                    remaining=remaining,
                )

        try:
            source.ensure_open().backup(
                destination.ensure_open(),
                pages=policy.pages_per_step,
                progress=on_step,
                sleep=policy.retry_sleep_seconds,
            )
        except RetryLimitExceeded as e:
            raise BackupError(f"Backup abandoned: {e}") from e
        except sqlite3.Error as e:
            raise BackupError(f"Backup failed: {e}") from e

        return progress

    def _open_destination(self, destination: str | Path) -> Handle:
        try:
            return self._bridge.open_persistent(
                destination, create=True, busy_timeout=0, verify=False
            )
        except EngineOpenError as e:
            raise BackupError(f"Cannot open backup destination {destination}: {e}") from e
