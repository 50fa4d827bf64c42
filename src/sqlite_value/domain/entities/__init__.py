"""Domain entities for the SQLite value bridge.

Exports:
    - Handle: Live, exclusively-owned connection to one SQLite instance
    - HandleBacking: Memory or file backing of a handle
"""

from sqlite_value.domain.entities.handle import Handle, HandleBacking

__all__ = [
    "Handle",
    "HandleBacking",
]
