"""Database error helpers."""

from __future__ import annotations

import re

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"
_SQLITE_UNIQUE = re.compile(r"unique constraint failed: (?P<columns>[\w., ]+)", re.IGNORECASE)
_POSTGRES_KEY = re.compile(r"key \((?P<columns>[^)]+)\)=", re.IGNORECASE)


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(original or error).lower()
    return "duplicate key" in message or "unique constraint" in message


def violated_columns(error: IntegrityError) -> tuple[str, ...]:
    """Best-effort names of the columns behind a unique violation.

    SQLite reports ``table.column`` pairs, PostgreSQL a ``Key (column)=`` detail.
    """
    message = str(getattr(error, "orig", None) or error)
    match = _SQLITE_UNIQUE.search(message) or _POSTGRES_KEY.search(message)
    if match is None:
        return ()
    columns = []
    for raw in match.group("columns").split(","):
        name = raw.strip().rsplit(".", 1)[-1]
        if name:
            columns.append(name)
    return tuple(columns)


__all__ = ["is_unique_violation", "violated_columns"]
