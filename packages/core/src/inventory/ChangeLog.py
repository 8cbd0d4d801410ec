"""Append-only change history: recording, queries, export and retention cleanup."""

import csv
import io
import logging
from datetime import date, datetime, timedelta

from database.LogRepository import LogRepository
from inventory.models import LogEntry

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 365

CSV_HEADERS = (
    "Timestamp",
    "Action",
    "Audit Date",
    "Item",
    "Field",
    "Old Value",
    "New Value",
    "Description",
    "User",
    "Change Magnitude",
)


def _cell(value: object) -> str:
    return "" if value is None else str(value)


class ChangeLog:
    """Records field-level changes and answers history queries."""

    def __init__(self, logs: LogRepository) -> None:
        self._logs = logs

    def record(
        self,
        action: str,
        audit_date: date,
        description: str,
        item: str | None = None,
        field_name: str | None = None,
        old_value: object = None,
        new_value: object = None,
        user_id: str | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            action=action,
            audit_date=audit_date,
            description=description,
            item=item,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            user_id=user_id,
        )
        return self._logs.append(entry)

    def filtered(self, **filters) -> list[LogEntry]:
        """Entries matching ``LogRepository.find`` filters, newest first."""
        return self._logs.find(**filters)

    def recent(self, limit: int = 100) -> list[LogEntry]:
        return self._logs.find(limit=limit)

    def for_audit(self, audit_date: date) -> list[LogEntry]:
        return self._logs.find(audit_date=audit_date)

    def for_item(self, item: str, limit: int = 500) -> list[LogEntry]:
        return self._logs.find(item=item, limit=limit)

    def activity_summary(self, user_id: str | None = None, days: int = 30) -> list[dict]:
        return self._logs.action_summary(user_id=user_id, days=days)

    def clean_old_logs(self, days_to_keep: int = DEFAULT_RETENTION_DAYS) -> int:
        """Delete entries older than ``days_to_keep`` days; returns how many."""
        cutoff = datetime.now() - timedelta(days=days_to_keep)
        removed = self._logs.delete_older_than(cutoff)
        logger.info("Removed %d log entries older than %s", removed, cutoff.date())
        return removed

    def stats(self, days: int = 30) -> dict:
        return {**self._logs.stats(days=days), "period": days}

    def export(self, start: datetime | None = None, end: datetime | None = None) -> list[LogEntry]:
        """Every entry in the time range, newest first."""
        return self._logs.find(start=start, end=end, limit=None)

    @staticmethod
    def to_csv(entries: list[LogEntry]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for entry in entries:
            writer.writerow([
                entry.timestamp.isoformat(),
                entry.action,
                entry.audit_date.isoformat(),
                _cell(entry.item),
                _cell(entry.field_name),
                _cell(entry.old_value),
                _cell(entry.new_value),
                entry.description,
                _cell(entry.user_id),
                _cell(entry.change_magnitude),
            ])
        return buffer.getvalue()
