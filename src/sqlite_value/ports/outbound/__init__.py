"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the embedded engine the bridge
depends on.
"""

from sqlite_value.ports.outbound.image_bridge import ImageBridge

__all__ = [
    "ImageBridge",
]
