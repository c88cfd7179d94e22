"""
Database access.

Thin wrapper over a psycopg connection to PostgreSQL:
- Connection from the [database] url, or an embedded server when empty
- Schema initialization from schema.sql
- Transactions committed on success and rolled back on error
"""

import contextlib
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import psycopg
from psycopg.rows import dict_row

from corvid.log import get_logger

logger = get_logger(__name__)

SCHEMA_FILE = Path(__file__).parent / "schema.sql"


class DatabaseError(Exception):
    """Base exception for database errors."""

    pass


class Database:
    """
    PostgreSQL database of the platform.

    Usable as a context manager:

        with Database(url) as db:
            rows = db.select("SELECT login FROM users")
    """

    def __init__(self, url: str | None = None, data_dir: Path | None = None):
        """
        Args:
            url: PostgreSQL URI; read from [database] url when None. An empty
                URI starts an embedded server.
            data_dir: Data directory of the embedded server
        """
        if url is None:
            import corvid.config

            url = corvid.config.get("database").url

        self.url = url
        self.data_dir = data_dir or Path("data/pgdata")
        self._conn: psycopg.Connection | None = None
        self._lock = threading.RLock()

    def connect(self) -> None:
        """
        Connect to the database and initialize the schema.

        Raises:
            DatabaseError: If connection fails
        """
        try:
            url = self.url
            if not url:
                from corvid import pgserver

                url = pgserver.get_server(self.data_dir).get_uri()
                logger.warning("No database URL configured, using an embedded server")

            self._conn = psycopg.connect(url)
            self._init_schema()

        except (psycopg.Error, RuntimeError, OSError) as e:
            self.close()
            raise DatabaseError(f"Failed to connect to database: {e}") from e

    def _init_schema(self) -> None:
        schema_sql = SCHEMA_FILE.read_text(encoding="utf-8")
        with self._conn.cursor() as cur:
            cur.execute(schema_sql)
        self._conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def connected(self) -> bool:
        return self._conn is not None

    @contextlib.contextmanager
    def transaction(self) -> Iterator[psycopg.Cursor]:
        """
        Run statements in one transaction.

        Yields:
            A cursor; the transaction commits when the block exits normally

        Raises:
            DatabaseError: If a statement or the commit fails
        """
        if not self._conn:
            raise DatabaseError("Not connected to database")

        with self._lock:
            try:
                with self._conn.cursor() as cur:
                    yield cur
                self._conn.commit()
            except psycopg.Error as e:
                self._conn.rollback()
                raise DatabaseError(f"Transaction failed: {e}") from e
            except BaseException:
                self._conn.rollback()
                raise

    def execute(self, sql: str, params: tuple | dict | None = None) -> int:
        """
        Execute one statement in its own transaction.

        Returns:
            Number of affected rows
        """
        with self.transaction() as cur:
            cur.execute(sql, params)
            return cur.rowcount

    def select(self, sql: str, params: tuple | dict | None = None) -> list[dict[str, Any]]:
        """
        Run a query.

        Returns:
            Rows as dictionaries keyed by column name
        """
        if not self._conn:
            raise DatabaseError("Not connected to database")

        with self._lock:
            try:
                with self._conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
                self._conn.commit()
                return rows
            except psycopg.Error as e:
                self._conn.rollback()
                raise DatabaseError(f"Query failed: {e}") from e

    def insert(self, table: str, values: dict[str, Any]) -> None:
        """Insert one row; column names come from the keys of values."""
        columns = list(values)
        placeholders = ", ".join(["%s"] * len(columns))
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        self.execute(sql, tuple(values[c] for c in columns))


__all__ = ["Database", "DatabaseError"]
