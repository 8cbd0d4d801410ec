"""Tests for the audit report aggregations."""

from datetime import date

import pytest

from inventory.models import MAIN_ITEMS

MARCH_5 = date(2024, 3, 5)
MARCH_20 = date(2024, 3, 20)


@pytest.fixture
def audits(audit_service):
    departments = ["Support", "Training"]
    audit_service.create_audit(
        MARCH_5,
        "Calamba",
        {
            "Mouse": {"departments": {"Support": 10, "Training": 4}, "stock": 2, "defectives": 1},
            "CPU": {"departments": {"Support": 20}},
        },
        departments,
    )
    audit_service.create_audit(
        MARCH_20,
        "Bay",
        {
            "Mouse": {"departments": {"Support": 6}, "defectives": 3},
            "Keyboard": {"departments": {"Training": 30}},
        },
        departments,
    )
    audit_service.create_audit(
        date(2024, 4, 2), "Calamba", {"Mouse": {"departments": {"Support": 1}}}, ["Support"]
    )


class TestMonthlySummary:
    def test_totals(self, audit_reports, audits):
        summary = audit_reports.monthly_summary(3, 2024)

        assert summary["audit_count"] == 2
        assert summary["total_units"] == 76
        assert summary["total_defectives"] == 4
        assert summary["defect_rate"] == 5.26
        assert summary["item_totals"] == {
            "CPU": 20,
            "Monitor": 0,
            "Keyboard": 30,
            "Mouse": 26,
            "Headset": 0,
        }
        assert summary["departments"] == ["Support", "Training"]

    def test_empty_month(self, audit_reports, audits):
        summary = audit_reports.monthly_summary(1, 2024)

        assert summary["audit_count"] == 0
        assert summary["defect_rate"] == 0.0
        assert summary["item_totals"] == {name: 0 for name in MAIN_ITEMS}


class TestItemTrends:
    def test_one_point_per_audit(self, audit_reports, audits):
        points = audit_reports.item_trends("Mouse")

        assert [(p["date"], p["site"], p["total"], p["defectives"]) for p in points] == [
            (MARCH_5, "Calamba", 17, 1),
            (MARCH_20, "Bay", 9, 3),
            (date(2024, 4, 2), "Calamba", 1, 0),
        ]

    def test_date_range_is_inclusive(self, audit_reports, audits):
        points = audit_reports.item_trends("Mouse", start=MARCH_20, end=date(2024, 3, 31))
        assert [p["date"] for p in points] == [MARCH_20]

    def test_unknown_item_counts_zero(self, audit_reports, audits):
        assert {p["total"] for p in audit_reports.item_trends("Laptop")} == {0}


class TestDefectsAnalysis:
    def test_by_item_and_estimated_by_department(self, audit_reports, audits):
        analysis = audit_reports.defects_analysis(3, 2024)

        assert analysis["total_audits"] == 2
        assert analysis["defects_by_item"]["Mouse"] == 4
        assert analysis["defects_by_item"]["CPU"] == 0
        assert analysis["defects_by_department"] == {"Support": 2, "Training": 2}

    def test_without_period_covers_every_audit(self, audit_reports, audits):
        assert audit_reports.defects_analysis()["total_audits"] == 3


class TestDepartmentReports:
    def test_performance(self, audit_reports, audits):
        report = audit_reports.department_performance(3, 2024)

        support = report["department_performance"]["Support"]
        assert support["total_items"] == 36
        assert support["item_breakdown"]["Mouse"] == 16
        assert support["item_breakdown"]["CPU"] == 20
        assert report["report_period"] == {"month": 3, "year": 2024}

    def test_performance_for_one_department(self, audit_reports, audits):
        report = audit_reports.department_performance(3, 2024, department="Training")

        assert list(report["department_performance"]) == ["Training"]
        assert report["department_performance"]["Training"]["total_items"] == 34

    def test_comparison(self, audit_reports, audits):
        comparison = audit_reports.department_comparison(3, 2024)["comparison"]

        assert comparison["Support"]["total_production"] == 36
        assert comparison["Support"]["average_per_audit"] == 18.0
        assert comparison["Support"]["peak_day"] == {"date": MARCH_5, "count": 30}
        assert comparison["Training"]["peak_day"] == {"date": MARCH_20, "count": 30}
        assert comparison["Training"]["item_distribution"]["Keyboard"] == 30

    def test_comparison_skips_unknown_departments(self, audit_reports, audits):
        report = audit_reports.department_comparison(3, 2024, ["Training", "Sales"])
        assert list(report["comparison"]) == ["Training"]

    def test_comparison_without_audits(self, audit_reports):
        report = audit_reports.department_comparison(3, 2024)
        assert report == {
            "comparison": {},
            "total_audits": 0,
            "report_period": {"month": 3, "year": 2024},
        }
