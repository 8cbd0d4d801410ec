"""SQLite database connection provider.

Opens a read-write connection to the inventory database and makes sure the
schema exists.
"""

import logging
import sqlite3
from pathlib import Path

from database.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class DatabaseProvider:
    """Manage a single SQLite connection shared by the repositories.

    The connection is opened with ``check_same_thread=False`` so the API's
    worker threads can reuse it, and with ``sqlite3.Row`` rows so
    repositories can read columns by name.
    """

    def __init__(self, db_path: str) -> None:
        """Open a connection to the given database file, creating it if needed.

        Args:
            db_path: Filesystem path to the SQLite database, or ``":memory:"``.

        Raises:
            FileNotFoundError: If the path's directory cannot be created.
            ConnectionError: If SQLite cannot open the file.
        """
        if db_path == MEMORY_DB:
            target = MEMORY_DB
        else:
            try:
                resolved = Path(db_path).resolve()
                resolved.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileNotFoundError(
                    f"Could not resolve database path '{db_path}': {e}"
                ) from e
            target = str(resolved)

        try:
            self._connection = sqlite3.connect(target, check_same_thread=False)
        except sqlite3.Error as e:
            raise ConnectionError(
                f"Failed to connect to database at '{target}': {e}"
            ) from e

        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA foreign_keys = ON")
        logger.info("Opened inventory database at %s", target)

    def initialize_schema(self) -> None:
        """Create all tables and indexes that do not exist yet."""
        try:
            self._connection.executescript(SCHEMA_SQL)
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to initialize schema: {e}") from e

    def get_connection(self) -> sqlite3.Connection:
        """Return the underlying SQLite connection."""
        return self._connection

    def close(self) -> None:
        self._connection.close()
