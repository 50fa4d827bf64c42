"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Outbound ports: Dependencies on external systems (e.g., ImageBridge)

Adapters implement these ports with concrete functionality.
"""

from sqlite_value.ports.outbound import ImageBridge

__all__ = [
    # Outbound ports
    "ImageBridge",
]
