"""Persistence for the append-only change log.

There is deliberately no update method: entries are only ever inserted, and
removed in bulk by retention cleanup.
"""

import json
import sqlite3
from datetime import date, datetime, timedelta

from database.QueryExecutor import QueryExecutor
from inventory.models import LogEntry

_COLUMNS = (
    "id, action, audit_date, item, field, old_value, new_value, description, "
    "user_id, timestamp"
)


def _row_to_entry(row: sqlite3.Row) -> LogEntry:
    return LogEntry(
        id=row["id"],
        action=row["action"],
        audit_date=date.fromisoformat(row["audit_date"]),
        item=row["item"],
        field_name=row["field"],
        old_value=json.loads(row["old_value"]) if row["old_value"] is not None else None,
        new_value=json.loads(row["new_value"]) if row["new_value"] is not None else None,
        description=row["description"],
        user_id=row["user_id"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )


class LogRepository:
    def __init__(self, executor: QueryExecutor) -> None:
        self._executor = executor

    def append(self, entry: LogEntry) -> LogEntry:
        entry.id = self._executor.insert(
            "INSERT INTO logs (action, audit_date, item, field, old_value, new_value, "
            "description, user_id, timestamp) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                entry.action,
                entry.audit_date.isoformat(),
                entry.item,
                entry.field_name,
                json.dumps(entry.old_value, default=str) if entry.old_value is not None else None,
                json.dumps(entry.new_value, default=str) if entry.new_value is not None else None,
                entry.description,
                entry.user_id,
                entry.timestamp.isoformat(),
            ),
        )
        return entry

    def find(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        action: str | None = None,
        item: str | None = None,
        field_name: str | None = None,
        user_id: str | None = None,
        audit_date: date | None = None,
        limit: int | None = 1000,
    ) -> list[LogEntry]:
        """Return matching entries, newest first. ``limit=None`` returns all of them."""
        clauses = ["1 = 1"]
        params: list = []
        if start is not None:
            clauses.append("timestamp >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("timestamp <= ?")
            params.append(end.isoformat())
        for column, value in (
            ("action", action),
            ("item", item),
            ("field", field_name),
            ("user_id", user_id),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        if audit_date is not None:
            clauses.append("audit_date = ?")
            params.append(audit_date.isoformat())

        query = (
            f"SELECT {_COLUMNS} FROM logs WHERE {' AND '.join(clauses)} "
            "ORDER BY timestamp DESC, id DESC"
        )
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = self._executor.fetch_all(query, tuple(params))
        return [_row_to_entry(r) for r in rows]

    def action_summary(self, user_id: str | None = None, days: int = 30) -> list[dict]:
        """Count and last activity per action over the last ``days`` days."""
        since = (datetime.now() - timedelta(days=days)).isoformat()
        clauses = ["timestamp >= ?"]
        params: list = [since]
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        rows = self._executor.fetch_all(
            "SELECT action, COUNT(*) AS n, MAX(timestamp) AS last_activity FROM logs "
            f"WHERE {' AND '.join(clauses)} GROUP BY action ORDER BY action ASC",
            tuple(params),
        )
        return [
            {
                "action": row["action"],
                "count": row["n"],
                "last_activity": datetime.fromisoformat(row["last_activity"]),
            }
            for row in rows
        ]

    def stats(self, days: int = 30, top: int = 10) -> dict:
        """Activity breakdown over the last ``days`` days.

        ``by_item`` and ``by_user`` hold the ``top`` busiest values, most
        active first; ``daily_activity`` is oldest day first.
        """
        since = (datetime.now() - timedelta(days=days)).isoformat()

        def grouped(column: str, where: str = "", order: str = "n DESC", limit: int | None = None):
            query = (
                f"SELECT {column} AS key, COUNT(*) AS n FROM logs "
                f"WHERE timestamp >= ? {where} GROUP BY key ORDER BY {order}, key ASC"
            )
            params: tuple = (since,)
            if limit is not None:
                query += " LIMIT ?"
                params = (since, limit)
            return self._executor.fetch_all(query, params)

        total = self._executor.fetch_one(
            "SELECT COUNT(*) AS n FROM logs WHERE timestamp >= ?", (since,)
        )
        return {
            "total_logs": total["n"],
            "by_action": [
                {"action": r["key"], "count": r["n"]} for r in grouped("action")
            ],
            "by_item": [
                {"item": r["key"], "count": r["n"]}
                for r in grouped("item", "AND item IS NOT NULL", limit=top)
            ],
            "by_user": [
                {"user_id": r["key"], "count": r["n"]}
                for r in grouped("user_id", "AND user_id IS NOT NULL", limit=top)
            ],
            "daily_activity": [
                {"date": date.fromisoformat(r["key"]), "count": r["n"]}
                for r in grouped("substr(timestamp, 1, 10)", order="key ASC")
            ],
        }

    def delete_older_than(self, cutoff: datetime) -> int:
        return self._executor.execute(
            "DELETE FROM logs WHERE timestamp < ?", (cutoff.isoformat(),)
        )
