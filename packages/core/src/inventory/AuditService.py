"""Per-site equipment audits with dynamic department columns."""

import logging
from datetime import date

from database.AuditRepository import AuditRepository
from inventory.ChangeLog import ChangeLog
from inventory.errors import ConflictError, NotFoundError
from inventory.models import MAIN_ITEMS, OTHER_ITEMS, Audit, ItemCounts

logger = logging.getLogger(__name__)


def _normalize_items(items: dict[str, dict], departments: list[str]) -> dict[str, ItemCounts]:
    """Ensure every main item exists and carries every known department."""
    normalized = {}
    for name in (*MAIN_ITEMS, *(n for n in items if n not in MAIN_ITEMS)):
        counts = ItemCounts.from_dict(items.get(name) or {})
        for department in departments:
            counts.departments.setdefault(department, 0)
        normalized[name] = counts
    return normalized


def _fill(values: dict[str, int] | None, names: tuple[str, ...]) -> dict[str, int]:
    values = values or {}
    filled = {name: int(values.get(name) or 0) for name in names}
    filled.update({k: int(v) for k, v in values.items() if k not in filled})
    return filled


class AuditService:
    """One audit per (date, site). Every change is written to the change log."""

    def __init__(self, audits: AuditRepository, change_log: ChangeLog) -> None:
        self._audits = audits
        self._change_log = change_log

    def list_audits(
        self,
        site: str | None = None,
        month: int | None = None,
        year: int | None = None,
    ) -> list[Audit]:
        return self._audits.find(site=site, month=month, year=year)

    def get_audit(self, audit_date: date, site: str) -> Audit:
        audit = self._audits.get(audit_date, site)
        if audit is None:
            raise NotFoundError("Audit not found")
        return audit

    def create_audit(
        self,
        audit_date: date,
        site: str,
        items: dict[str, dict],
        departments: list[str],
        other_items: dict[str, int] | None = None,
        missing_items: dict[str, int] | None = None,
        created_by: str | None = None,
    ) -> Audit:
        """Record a new audit.

        Raises:
            ConflictError: If the site already has an audit for this date.
        """
        if self._audits.get(audit_date, site) is not None:
            raise ConflictError(f"Audit already exists for {site} on {audit_date.isoformat()}")

        audit = Audit(
            date=audit_date,
            site=site,
            items=_normalize_items(items, departments),
            other_items=_fill(other_items, OTHER_ITEMS),
            missing_items=_fill(missing_items, MAIN_ITEMS),
            created_by=created_by,
        )
        self._audits.insert(audit)
        self._change_log.record(
            "create",
            audit_date,
            f"Created audit for {site}",
            user_id=created_by,
        )
        logger.info("Created audit for %s on %s", site, audit_date)
        return audit

    def update_audit(
        self,
        audit_date: date,
        site: str,
        items: dict[str, dict] | None = None,
        other_items: dict[str, int] | None = None,
        missing_items: dict[str, int] | None = None,
        user_id: str | None = None,
    ) -> Audit:
        """Replace the counts of the given items and log every changed value.

        Raises:
            NotFoundError: If there is no such audit.
        """
        audit = self.get_audit(audit_date, site)
        changes: list[tuple[str, str, int, int]] = []

        for name, data in (items or {}).items():
            new = ItemCounts.from_dict(data)
            old = audit.items.get(name, ItemCounts())
            for department in sorted(set(old.departments) | set(new.departments)):
                before = old.departments.get(department, 0)
                after = new.departments.get(department, 0)
                if before != after:
                    changes.append((name, department, before, after))
            for field_name in ("stock", "defectives"):
                before, after = getattr(old, field_name), getattr(new, field_name)
                if before != after:
                    changes.append((name, field_name, before, after))
            audit.items[name] = new

        for field_name, current, updates in (
            ("other_items", audit.other_items, other_items),
            ("missing_items", audit.missing_items, missing_items),
        ):
            for name, value in (updates or {}).items():
                before, after = current.get(name, 0), int(value)
                if before != after:
                    changes.append((name, field_name, before, after))
                current[name] = after

        self._audits.save(audit)
        for item, field_name, before, after in changes:
            self._change_log.record(
                "update",
                audit_date,
                f"{item} {field_name} changed from {before} to {after}",
                item=item,
                field_name=field_name,
                old_value=before,
                new_value=after,
                user_id=user_id,
            )
        logger.info("Updated audit for %s on %s (%d changes)", site, audit_date, len(changes))
        return audit

    def delete_audit(self, audit_date: date, site: str, user_id: str | None = None) -> None:
        audit = self.get_audit(audit_date, site)
        self._audits.delete(audit.id)
        self._change_log.record(
            "delete", audit_date, f"Deleted audit for {site}", user_id=user_id
        )

    @staticmethod
    def audit_template(departments: list[str]) -> dict:
        """Empty audit structure for the current set of departments."""
        return {
            "items": {
                name: ItemCounts(departments={d: 0 for d in departments}).to_dict()
                for name in MAIN_ITEMS
            },
            "other_items": {name: 0 for name in OTHER_ITEMS},
            "missing_items": {name: 0 for name in MAIN_ITEMS},
            "departments": list(departments),
        }
