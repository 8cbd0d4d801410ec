"""Persistence for audit snapshots."""

import json
import sqlite3
from datetime import date, datetime

from database.QueryExecutor import QueryExecutor
from inventory.models import Audit, ItemCounts

_COLUMNS = (
    "id, date, site, items, other_items, missing_items, created_by, created_at, updated_at"
)


def _row_to_audit(row: sqlite3.Row) -> Audit:
    items = json.loads(row["items"])
    return Audit(
        id=row["id"],
        date=date.fromisoformat(row["date"]),
        site=row["site"],
        items={name: ItemCounts.from_dict(counts) for name, counts in items.items()},
        other_items=json.loads(row["other_items"]),
        missing_items=json.loads(row["missing_items"]),
        created_by=row["created_by"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _audit_params(audit: Audit) -> dict:
    return {
        "id": audit.id,
        "date": audit.date.isoformat(),
        "site": audit.site,
        "items": json.dumps({name: c.to_dict() for name, c in audit.items.items()}),
        "other_items": json.dumps(audit.other_items),
        "missing_items": json.dumps(audit.missing_items),
        "created_by": audit.created_by,
        "created_at": audit.created_at.isoformat(),
        "updated_at": audit.updated_at.isoformat(),
    }


class AuditRepository:
    def __init__(self, executor: QueryExecutor) -> None:
        self._executor = executor

    def get(self, audit_date: date, site: str) -> Audit | None:
        row = self._executor.fetch_one(
            f"SELECT {_COLUMNS} FROM audits WHERE date = ? AND site = ?",
            (audit_date.isoformat(), site),
        )
        return _row_to_audit(row) if row else None

    def find(
        self,
        site: str | None = None,
        month: int | None = None,
        year: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Audit]:
        """List audits oldest first, optionally for one site and one calendar month.

        ``month`` is 1-based and only applies together with ``year``.
        ``start`` and ``end`` bound the audit date inclusively.
        """
        clauses = ["1 = 1"]
        params: list = []
        if site is not None:
            clauses.append("site = ?")
            params.append(site)
        if month is not None and year is not None:
            clauses.append("substr(date, 1, 7) = ?")
            params.append(f"{year:04d}-{month:02d}")
        if start is not None:
            clauses.append("date >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("date <= ?")
            params.append(end.isoformat())

        rows = self._executor.fetch_all(
            f"SELECT {_COLUMNS} FROM audits WHERE {' AND '.join(clauses)} ORDER BY date ASC",
            tuple(params),
        )
        return [_row_to_audit(r) for r in rows]

    def insert(self, audit: Audit) -> Audit:
        self._executor.insert(
            f"INSERT INTO audits ({_COLUMNS}) VALUES (:id, :date, :site, :items, "
            ":other_items, :missing_items, :created_by, :created_at, :updated_at)",
            _audit_params(audit),
        )
        return audit

    def save(self, audit: Audit) -> Audit:
        audit.updated_at = datetime.now()
        self._executor.execute(
            "UPDATE audits SET items = :items, other_items = :other_items, "
            "missing_items = :missing_items, updated_at = :updated_at WHERE id = :id",
            _audit_params(audit),
        )
        return audit

    def delete(self, audit_id: str) -> int:
        return self._executor.execute("DELETE FROM audits WHERE id = ?", (audit_id,))
