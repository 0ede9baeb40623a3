"""Database connection helpers."""

from __future__ import annotations

import itertools
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_savepoint_ids = itertools.count(1)


def get_connection(
    database_path: Path | str, *, read_only: bool = False
) -> sqlite3.Connection:
    """Open the workspace database with foreign keys and named rows."""
    if read_only:
        uri = f"{Path(database_path).resolve().as_uri()}?mode=ro"
        connection = sqlite3.connect(uri, uri=True)
    else:
        connection = sqlite3.connect(str(database_path))
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON;")
    return connection


@contextmanager
def transaction(connection: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Commit on success and roll back when the block raises.

    A block opened inside another one becomes a savepoint, so only the
    outermost block commits and a failure anywhere undoes the whole unit.
    """
    if connection.in_transaction:
        name = f"nested_{next(_savepoint_ids)}"
        connection.execute(f"SAVEPOINT {name}")
        try:
            yield connection
        except Exception:
            connection.execute(f"ROLLBACK TO SAVEPOINT {name}")
            connection.execute(f"RELEASE SAVEPOINT {name}")
            raise
        connection.execute(f"RELEASE SAVEPOINT {name}")
        return

    connection.execute("BEGIN")
    try:
        yield connection
    except Exception:
        connection.rollback()
        raise
    else:
        connection.commit()
