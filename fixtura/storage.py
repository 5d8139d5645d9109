"""
Storage collaborators for data-backed fixtures.

ActiveFixture talks to its backing store only through the StorageBackend
protocol: an existence check, a clear, a keyed insert, and a row listing for
assertions. Two backends ship with the package:

- InMemoryStorage: dictionaries with per-table auto-increment keys
- SqliteStorage: a sqlite3 database (use ":memory:" for tests)

Errors raised by the underlying store (e.g. sqlite3.Error) are not wrapped.
"""

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from fixtura.exceptions import ConfigError

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


@runtime_checkable
class StorageBackend(Protocol):
    """Interface a fixture uses to populate and clear a table."""

    def has_table(self, table: str) -> bool:
        """Check whether ``table`` exists."""
        ...

    def clear(self, table: str) -> None:
        """Remove all rows from ``table``."""
        ...

    def insert(self, table: str, row: Row) -> Any:
        """Insert one row and return its generated primary key."""
        ...

    def rows(self, table: str) -> list[dict[str, Any]]:
        """Return all rows of ``table``."""
        ...


class InMemoryStorage:
    """Dictionary-backed storage with auto-increment primary keys."""

    def __init__(self, tables: Sequence[str] = (), primary_key: str = "id") -> None:
        self.primary_key = primary_key
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}
        for table in tables:
            self.create_table(table)

    def create_table(self, table: str, columns: Sequence[str] = ()) -> None:
        """Create an empty table. Columns are accepted for parity and ignored."""
        self._tables.setdefault(table, [])
        self._sequences.setdefault(table, 0)

    def has_table(self, table: str) -> bool:
        return table in self._tables

    def clear(self, table: str) -> None:
        self._table(table).clear()

    def insert(self, table: str, row: Row) -> int:
        rows = self._table(table)
        self._sequences[table] += 1
        key = self._sequences[table]
        rows.append({**row, self.primary_key: key})
        return key

    def rows(self, table: str) -> list[dict[str, Any]]:
        return [dict(row) for row in self._table(table)]

    def _table(self, table: str) -> list[dict[str, Any]]:
        if table not in self._tables:
            raise ConfigError(f"Table does not exist: {table}")
        return self._tables[table]

    def close(self) -> None:
        """Nothing to release; present for parity with SqliteStorage."""

    def __repr__(self) -> str:
        counts = {table: len(rows) for table, rows in self._tables.items()}
        return f"InMemoryStorage({counts})"


class SqliteStorage:
    """
    SQLite-backed storage.

    Tables created through ``create_table`` get an INTEGER PRIMARY KEY
    column named after ``primary_key``; the generated key returned by
    ``insert`` is the row id.
    """

    def __init__(self, db_path: str | Path = ":memory:", primary_key: str = "id") -> None:
        """
        Open (or create) the database.

        Args:
            db_path: Path to the SQLite database (use ":memory:" for testing)
            primary_key: Name of the generated key column
        """
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(db_path)
        self.primary_key = primary_key
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row

    def create_table(self, table: str, columns: Sequence[str] = ()) -> None:
        """Create ``table`` with a generated key and untyped columns."""
        column_defs = [f"{_quote(self.primary_key)} INTEGER PRIMARY KEY AUTOINCREMENT"]
        column_defs.extend(_quote(column) for column in columns if column != self.primary_key)
        self.conn.execute(f"CREATE TABLE IF NOT EXISTS {_quote(table)} ({', '.join(column_defs)})")
        self.conn.commit()

    def has_table(self, table: str) -> bool:
        cursor = self.conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        )
        return cursor.fetchone() is not None

    def clear(self, table: str) -> None:
        self.conn.execute(f"DELETE FROM {_quote(table)}")
        self.conn.commit()

    def insert(self, table: str, row: Row) -> int | None:
        columns = ", ".join(_quote(column) for column in row)
        placeholders = ", ".join("?" for _ in row)
        if row:
            sql = f"INSERT INTO {_quote(table)} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {_quote(table)} DEFAULT VALUES"
        cursor = self.conn.execute(sql, tuple(row.values()))
        self.conn.commit()
        return cursor.lastrowid

    def rows(self, table: str) -> list[dict[str, Any]]:
        cursor = self.conn.execute(f"SELECT * FROM {_quote(table)}")
        return [dict(row) for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __repr__(self) -> str:
        return f"SqliteStorage({self.db_path!r})"


def _quote(identifier: str) -> str:
    """Quote an SQL identifier."""
    return '"' + identifier.replace('"', '""') + '"'
