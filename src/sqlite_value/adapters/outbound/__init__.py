"""Outbound adapters - implementations of outbound ports.

These adapters implement the ImageBridge port on top of the standard
library's sqlite3 driver, one class per materialization strategy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlite_value.adapters.outbound.memory_bridge import MemoryImageBridge
from sqlite_value.adapters.outbound.tempfile_bridge import TempFileImageBridge

if TYPE_CHECKING:
    from sqlite_value.infrastructure.config import BridgeConfig
    from sqlite_value.ports.outbound import ImageBridge


def create_bridge(config: BridgeConfig) -> ImageBridge:
    """Build the ImageBridge selected by configuration.

    Raises:
        ValueError: If the configured strategy is unknown.
    """
    if config.strategy == "memory":
        return MemoryImageBridge()
    if config.strategy == "tempfile":
        return TempFileImageBridge(temp_dir=config.temp_dir)
    raise ValueError(f"Unknown bridge strategy: {config.strategy}")


__all__ = [
    "MemoryImageBridge",
    "TempFileImageBridge",
    "create_bridge",
]
