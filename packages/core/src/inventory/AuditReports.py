"""Read-only aggregations over audits for the reporting endpoints.

Departments are not a managed registry, so every report works with the
departments that actually appear in the audits it covers.
"""

import math
from datetime import date

from database.AuditRepository import AuditRepository
from inventory.models import MAIN_ITEMS, Audit

# Share of a department's count assumed defective when estimating
# defects per department; audits only record defectives per item.
ESTIMATED_DEPARTMENT_DEFECT_RATE = 0.05


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _departments_in(audits: list[Audit]) -> list[str]:
    names = {
        department
        for audit in audits
        for counts in audit.items.values()
        for department in counts.departments
    }
    return sorted(names)


def _period(month: int | None, year: int | None) -> dict:
    return {"month": month, "year": year}


class AuditReports:
    """Summaries, trends and department breakdowns computed from stored audits."""

    def __init__(self, audits: AuditRepository) -> None:
        self._audits = audits

    def monthly_summary(self, month: int, year: int) -> dict:
        audits = self._audits.find(month=month, year=year)
        total_units = sum(c.overall_total for a in audits for c in a.items.values())
        total_defectives = sum(c.defectives for a in audits for c in a.items.values())
        item_totals = {
            name: sum(a.items[name].overall_total for a in audits if name in a.items)
            for name in MAIN_ITEMS
        }
        return {
            "month": month,
            "year": year,
            "audit_count": len(audits),
            "total_units": total_units,
            "total_defectives": total_defectives,
            "defect_rate": _rate(total_defectives, total_units),
            "item_totals": item_totals,
            "departments": _departments_in(audits),
        }

    def item_trends(
        self,
        item: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[dict]:
        """One point per audit, oldest first. Audits without the item count as zero."""
        points = []
        for audit in self._audits.find(start=start, end=end):
            counts = audit.items.get(item)
            points.append({
                "date": audit.date,
                "site": audit.site,
                "total": counts.overall_total if counts else 0,
                "defectives": counts.defectives if counts else 0,
            })
        return points

    def defects_analysis(self, month: int | None = None, year: int | None = None) -> dict:
        audits = self._audits.find(month=month, year=year)
        departments = _departments_in(audits)

        by_item: dict[str, int] = {}
        by_department = {name: 0 for name in departments}
        for audit in audits:
            for name, counts in audit.items.items():
                by_item[name] = by_item.get(name, 0) + counts.defectives
                for department, count in counts.departments.items():
                    estimate = math.floor(count * ESTIMATED_DEPARTMENT_DEFECT_RATE + 0.5)
                    by_department[department] += estimate

        return {
            "defects_by_item": by_item,
            "defects_by_department": by_department,
            "total_audits": len(audits),
            "departments": departments,
        }

    def department_performance(
        self,
        month: int | None = None,
        year: int | None = None,
        department: str | None = None,
    ) -> dict:
        audits = self._audits.find(month=month, year=year)
        departments = _departments_in(audits)
        if department is not None:
            departments = [d for d in departments if d == department]

        performance = {name: {"total_items": 0, "item_breakdown": {}} for name in departments}
        for audit in audits:
            for item, counts in audit.items.items():
                for name, entry in performance.items():
                    if name not in counts.departments:
                        continue
                    count = counts.departments[name]
                    entry["total_items"] += count
                    entry["item_breakdown"][item] = entry["item_breakdown"].get(item, 0) + count

        return {
            "department_performance": performance,
            "total_audits": len(audits),
            "report_period": _period(month, year),
        }

    def department_comparison(
        self,
        month: int | None = None,
        year: int | None = None,
        departments: list[str] | None = None,
    ) -> dict:
        """Compare departments over the selected audits.

        Requested departments that never appear in those audits are left
        out. ``peak_day`` is the audit with the highest total for the
        department, the earliest one on ties.
        """
        audits = self._audits.find(month=month, year=year)
        in_scope = _departments_in(audits)
        selected = [d for d in departments if d in in_scope] if departments else in_scope

        comparison = {}
        for name in selected:
            distribution: dict[str, int] = {}
            peak = {"date": None, "count": 0}
            total = 0
            for audit in audits:
                audit_total = 0
                for item, counts in audit.items.items():
                    if name not in counts.departments:
                        continue
                    count = counts.departments[name]
                    distribution[item] = distribution.get(item, 0) + count
                    audit_total += count
                total += audit_total
                if audit_total > peak["count"]:
                    peak = {"date": audit.date, "count": audit_total}
            comparison[name] = {
                "total_production": total,
                "average_per_audit": round(total / len(audits), 2) if audits else 0.0,
                "peak_day": peak,
                "item_distribution": distribution,
            }

        return {
            "comparison": comparison,
            "total_audits": len(audits),
            "report_period": _period(month, year),
        }
