"""
SQLite Value - whole SQLite databases as immutable byte values

Every operation takes a database image, opens a private engine instance on
it, does one unit of work, and either returns a brand-new image or a result
projected into host values.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
