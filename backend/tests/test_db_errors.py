"""Tests for IntegrityError inspection helpers."""

from sqlalchemy.exc import IntegrityError

from db import is_unique_violation, violated_columns


class _PgError(Exception):
    sqlstate = "23505"


def _integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, orig)


def test_sqlite_unique_violation_reports_column():
    error = _integrity_error(Exception("UNIQUE constraint failed: users.email"))

    assert is_unique_violation(error)
    assert violated_columns(error) == ("email",)


def test_sqlite_composite_violation_reports_every_column():
    error = _integrity_error(Exception("UNIQUE constraint failed: users.username, users.email"))

    assert violated_columns(error) == ("username", "email")


def test_postgres_unique_violation_reports_column():
    error = _integrity_error(
        _PgError('duplicate key value violates unique constraint "ix_users_username"\n'
                 "DETAIL:  Key (username)=(ab) already exists.")
    )

    assert is_unique_violation(error)
    assert violated_columns(error) == ("username",)


def test_non_unique_integrity_error():
    error = _integrity_error(Exception("NOT NULL constraint failed: users.avatar"))

    assert not is_unique_violation(error)
    assert violated_columns(error) == ()
