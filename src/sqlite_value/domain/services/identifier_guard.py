"""Allow-list check for identifiers spliced into SQL text.

SQLite has no bind-parameter form for identifiers, so a table name that has
to appear unquoted in a statement is checked character by character first:
letters, digits and underscore only. Anything else is rejected before a
statement is built.
"""

from __future__ import annotations

from sqlite_value.domain.exceptions import InvalidIdentifierError


def is_valid_identifier(name: str) -> bool:
    """True if `name` is non-empty and made only of letters, digits and '_'."""
    return bool(name) and all(c.isalnum() or c == "_" for c in name)


def validate_identifier(name: str) -> str:
    """Return `name` unchanged if it passes the allow-list.

    Raises:
        InvalidIdentifierError: If any character falls outside the allow-list.
    """
    if not isinstance(name, str) or not is_valid_identifier(name):
        raise InvalidIdentifierError(str(name))
    return name
