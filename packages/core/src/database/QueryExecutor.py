"""Statement executor shared by the repositories.

Every write is committed as soon as it runs unless the caller opened an
explicit ``transaction()``. Multi-record operations therefore apply one
record at a time and keep earlier writes when a later one fails.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from inventory.errors import ConflictError

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Runs parameterised SQL against an SQLite connection.

    Reads go through ``fetch_all``/``fetch_one`` and must be SELECT
    statements; writes go through ``execute``. SQLite constraint violations
    surface as ``ConflictError``, any other driver failure as
    ``RuntimeError``.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._transaction_depth = 0

    def fetch_all(self, query: str, params: tuple | dict = ()) -> list[sqlite3.Row]:
        """Execute a SELECT statement and return every row.

        Raises:
            ValueError: If the statement is not a SELECT.
            RuntimeError: If the database returns an error.
        """
        self._validate_read(query)
        try:
            return self._connection.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise RuntimeError(f"Query execution failed: {e}") from e

    def fetch_one(self, query: str, params: tuple | dict = ()) -> sqlite3.Row | None:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None

    def execute(self, statement: str, params: tuple | dict = ()) -> int:
        """Execute a write statement and return the number of affected rows.

        Raises:
            ConflictError: If a UNIQUE or CHECK constraint rejects the write.
            RuntimeError: If the database returns any other error.
        """
        try:
            cursor = self._connection.execute(statement, params)
        except sqlite3.IntegrityError as e:
            self._abort()
            raise ConflictError(f"Write rejected by the store: {e}") from e
        except sqlite3.Error as e:
            self._abort()
            logger.error("Statement failed: %s", e)
            raise RuntimeError(f"Statement execution failed: {e}") from e

        if self._transaction_depth == 0:
            self._connection.commit()
        return cursor.rowcount

    def insert(self, statement: str, params: tuple | dict = ()) -> int | None:
        """Execute an INSERT and return the new row id."""
        try:
            cursor = self._connection.execute(statement, params)
        except sqlite3.IntegrityError as e:
            self._abort()
            raise ConflictError(f"Write rejected by the store: {e}") from e
        except sqlite3.Error as e:
            self._abort()
            logger.error("Insert failed: %s", e)
            raise RuntimeError(f"Statement execution failed: {e}") from e

        if self._transaction_depth == 0:
            self._connection.commit()
        return cursor.lastrowid

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group the writes made inside the block into one transaction.

        Nested blocks join the outermost transaction. The layout engine does
        not require this; it is here for callers that want all-or-nothing
        batches.
        """
        self._transaction_depth += 1
        try:
            yield
        except BaseException:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                self._connection.rollback()
            raise
        self._transaction_depth -= 1
        if self._transaction_depth == 0:
            self._connection.commit()

    def _abort(self) -> None:
        # Inside a transaction the outer block decides; outside, drop the
        # implicit transaction sqlite3 opened for the failed statement.
        if self._transaction_depth == 0:
            self._connection.rollback()

    @staticmethod
    def _validate_read(query: str) -> None:
        stripped = query.strip()
        if not stripped:
            raise ValueError("Query must not be empty or whitespace-only.")
        if not stripped.upper().startswith("SELECT"):
            raise ValueError(
                "Only SELECT queries are allowed on the read path. "
                f"Received query starting with: '{stripped.split()[0]}'"
            )
