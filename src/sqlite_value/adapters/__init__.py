"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: ImageBridge strategies over sqlite3
"""

from sqlite_value.adapters.outbound import (
    MemoryImageBridge,
    TempFileImageBridge,
    create_bridge,
)

__all__ = [
    # Outbound adapters
    "MemoryImageBridge",
    "TempFileImageBridge",
    "create_bridge",
]
