"""End-to-end tests through the FastAPI application."""

from api.rate_limit import SlidingWindowRateLimiter


def _create_station(client, number, x, y, bay="A1", device_type="mouse"):
    response = client.post(
        "/stations",
        json={"device_type": device_type, "position": {"x": x, "y": y}, "bay": bay},
    )
    assert response.status_code == 201
    station = response.json()
    if number is not None:
        response = client.patch(f"/stations/{station['id']}/number", json={"station_number": number})
        assert response.status_code == 200
        station = response.json()
    return station


# =============================================================================
# Service endpoints and auth
# =============================================================================


class TestServiceEndpoints:
    def test_health_needs_no_key(self, api_client):
        response = api_client.get("/health", headers={"Authorization": ""})
        assert response.json() == {"status": "ok", "database": "ok"}

    def test_invalid_key(self, api_client):
        response = api_client.get("/stations/mouse", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_bare_key_accepted(self, api_client):
        response = api_client.get("/stations/mouse", headers={"Authorization": "test-key"})
        assert response.status_code == 200

    def test_rate_limit_status(self, api_client):
        body = api_client.get("/rate-limit").json()
        assert body["limit"] == 1000
        assert body["remaining"] == 1000

    def test_mutations_are_rate_limited(self, api_client):
        api_client.app.state.rate_limiter = SlidingWindowRateLimiter(limit=1)

        first = api_client.post("/stations", json={"device_type": "mouse"})
        assert first.status_code == 201
        assert first.headers["X-RateLimit-Remaining"] == "0"

        second = api_client.post("/stations", json={"device_type": "mouse"})
        assert second.status_code == 429
        assert second.json() == {"detail": "Rate limit exceeded"}

        assert api_client.get("/stations/mouse").status_code == 200


# =============================================================================
# Stations
# =============================================================================


class TestStationRoutes:
    def test_station_lifecycle(self, api_client):
        station = _create_station(api_client, 1, 10, 20)
        assert station["status"] == "empty"
        assert station["display_number"] == 1

        response = api_client.post(
            f"/stations/{station['id']}/device",
            json={"serial_number": "SN1", "brand": "HP", "model": "X500"},
        )
        assert response.json()["device"]["serial_number"] == "SN1"
        assert response.json()["status"] == "occupied"

        found = api_client.get("/stations/mouse/search", params={"serial_number": "sn"}).json()
        assert [s["id"] for s in found] == [station["id"]]

        assert api_client.delete(f"/stations/{station['id']}").status_code == 200
        assert api_client.get("/stations/mouse").json() == []

    def test_duplicate_number_conflicts(self, api_client):
        _create_station(api_client, 1, 0, 0)
        other = _create_station(api_client, None, 60, 0)

        response = api_client.patch(f"/stations/{other['id']}/number", json={"station_number": 1})
        assert response.status_code == 409
        assert response.json()["detail"] == "Station number 1 already exists for mouse"

    def test_unknown_station(self, api_client):
        response = api_client.patch("/stations/missing/position", json={"x": 1, "y": 2})
        assert response.status_code == 404
        assert response.json() == {"detail": "Station not found"}

    def test_invalid_device_type(self, api_client):
        assert api_client.get("/stations/monitor").status_code == 422

    def test_clone_multiple(self, api_client):
        station = _create_station(api_client, 1, 0, 0)

        response = api_client.post(
            "/stations/clone-multiple", json={"station_ids": [station["id"]], "target_bay": "B1"}
        )

        assert response.status_code == 201
        clone = response.json()["cloned_stations"][0]
        assert clone["position"] == {"x": 100, "y": 50}
        assert clone["station_number"] == 2

    def test_comprehensive_stats(self, api_client):
        _create_station(api_client, 1, 0, 0)
        stats = api_client.get("/stations/mouse/comprehensive-stats").json()
        assert stats["total_stations"] == 1
        assert stats["bays"] == ["A1"]


# =============================================================================
# Bays
# =============================================================================


class TestBayRoutes:
    def test_create_delete_and_reactivate(self, api_client):
        created = api_client.post(
            "/bays", json={"name": "a1", "device_type": "mouse", "position": {"x": 0, "y": 0}}
        )
        assert created.status_code == 201
        bay = created.json()["bay"]
        assert bay["name"] == "A1"
        assert bay["lifecycle"] == "active"

        assert api_client.delete(f"/bays/{bay['id']}").status_code == 200
        assert api_client.get("/bays/mouse").json() == []

        again = api_client.post(
            "/bays", json={"name": "A1", "device_type": "mouse", "position": {"x": 5, "y": 5}}
        ).json()
        assert again["reactivated"] is True
        assert again["bay"]["id"] == bay["id"]

    def test_delete_with_stations_conflicts(self, api_client):
        bay = api_client.post(
            "/bays", json={"name": "A1", "device_type": "mouse", "position": {"x": 0, "y": 0}}
        ).json()["bay"]
        _create_station(api_client, 1, 0, 0)
        _create_station(api_client, 2, 60, 0)

        response = api_client.delete(f"/bays/{bay['id']}")

        assert response.status_code == 409
        assert "Cannot delete bay with 2 stations" in response.json()["detail"]

        listing = api_client.get(f"/bays/{bay['id']}/stations").json()
        assert listing["station_count"] == 2

    def test_bulk_delete(self, api_client):
        ids = [
            api_client.post(
                "/bays", json={"name": name, "device_type": "mouse", "position": {"x": 0, "y": 0}}
            ).json()["bay"]["id"]
            for name in ("A1", "B1")
        ]

        response = api_client.request("DELETE", "/bays/bulk/delete", json={"bay_ids": ids})

        assert response.json() == {"message": "Deleted 2 bays", "count": 2}


# =============================================================================
# Layout
# =============================================================================


class TestLayoutRoutes:
    def test_validate_and_renumber_scenario(self, api_client):
        _create_station(api_client, 1, 0, 0)
        _create_station(api_client, 2, 60, 0)
        _create_station(api_client, 3, 9999, 9999)

        report = api_client.get("/layout/mouse/validate").json()
        assert report["valid"] is True

        response = api_client.post("/bays/A1/mouse/renumber", json={"start_number": 10})
        updates = [(u["old_number"], u["new_number"]) for u in response.json()["updates"]]
        assert updates == [(1, 10), (2, 11), (3, 12)]

    def test_overlap_and_autofix(self, api_client):
        _create_station(api_client, 1, 100, 100)
        _create_station(api_client, 2, 100, 100)

        report = api_client.get("/layout/mouse/validate").json()
        assert report["summary"] == {"overlaps": 1, "duplicates": 0, "too_close": 0}
        assert report["issues"][0]["position"] == {"x": 100, "y": 100}

        fixed = api_client.post("/layout/mouse/autofix", json={}).json()
        assert fixed["fixed_issues"] == ["Moved station 2 to resolve overlap"]
        assert api_client.get("/layout/mouse/validate").json()["valid"] is True

    def test_arrange(self, api_client):
        for number in (1, 2, 3):
            _create_station(api_client, number, 0, 0)

        response = api_client.post("/bays/A1/mouse/arrange", json={"pattern": "row"})

        assert response.json()["updated_stations"] == 3
        positions = [s["position"] for s in api_client.get("/stations/mouse").json()]
        assert positions == [{"x": 0, "y": 0}, {"x": 60, "y": 0}, {"x": 120, "y": 0}]

    def test_arrange_missing_bay(self, api_client):
        response = api_client.post("/bays/Z9/mouse/arrange", json={})
        assert response.status_code == 404

    def test_duplicate_with_devices(self, api_client):
        station = _create_station(api_client, 1, 0, 0)
        api_client.post(f"/stations/{station['id']}/device", json={"serial_number": "SN123"})

        response = api_client.post(
            "/bays/A1/mouse/duplicate", json={"target_bay": "B1", "copy_devices": True}
        )

        assert response.status_code == 201
        copy = response.json()["new_stations"][0]
        assert copy["device"]["serial_number"].startswith("SN123_COPY_")

        again = api_client.post("/bays/A1/mouse/duplicate", json={"target_bay": "B1"})
        assert again.status_code == 409

    def test_template_round_trip(self, api_client):
        _create_station(api_client, 1, 100, 100)
        _create_station(api_client, 2, 160, 130)
        template = api_client.get("/bays/A1/mouse/template").json()

        response = api_client.post(
            "/bays/mouse/from-template",
            json={"template": template, "bay_name": "C1", "start_position": {"x": 500, "y": 0}},
        )

        assert response.status_code == 201
        positions = [s["position"] for s in response.json()["new_stations"]]
        assert positions == [{"x": 500, "y": 0}, {"x": 560, "y": 30}]

        mismatch = api_client.post(
            "/bays/keyboard/from-template", json={"template": template, "bay_name": "C2"}
        )
        assert mismatch.status_code == 400

    def test_bay_stats(self, api_client):
        _create_station(api_client, 1, 10, 10)
        stats = api_client.get("/bays/A1/mouse/stats").json()
        assert stats["total_stations"] == 1
        assert stats["bounds"] == {"min_x": 10, "max_x": 10, "min_y": 10, "max_y": 10}


# =============================================================================
# Audits and logs
# =============================================================================


class TestAuditRoutes:
    def test_audit_flow_writes_logs(self, api_client):
        created = api_client.post(
            "/audits",
            json={
                "date": "2024-03-15",
                "site": "Calamba",
                "items": {"Mouse": {"departments": {"Support": 3}}},
                "departments": ["Support"],
            },
        )
        assert created.status_code == 201
        assert created.json()["items"]["Mouse"]["total"] == 3

        duplicate = api_client.post("/audits", json={"date": "2024-03-15", "site": "Calamba"})
        assert duplicate.status_code == 409

        updated = api_client.put(
            "/audits/2024-03-15/Calamba",
            json={"items": {"Mouse": {"departments": {"Support": 5}}}, "user_id": "lead"},
        )
        assert updated.json()["items"]["Mouse"]["total"] == 5

        logs = api_client.get("/logs", params={"action": "update"}).json()
        assert len(logs) == 1
        assert logs[0]["item"] == "Mouse"
        assert logs[0]["field"] == "Support"
        assert (logs[0]["old_value"], logs[0]["new_value"]) == (3, 5)
        assert logs[0]["change_magnitude"] == 2.0

    def test_missing_audit(self, api_client):
        assert api_client.get("/audits/2024-01-01/Bay").status_code == 404

    def test_log_cleanup(self, api_client):
        api_client.post(
            "/logs",
            json={"action": "update", "audit_date": "2024-03-15", "description": "manual"},
        )
        response = api_client.delete("/logs/cleanup", params={"days_to_keep": 30})
        assert response.json()["deleted_count"] == 0
        assert len(api_client.get("/logs/recent").json()) == 1


class TestLogExportRoutes:
    def _log(self, api_client, action="update", **extra):
        body = {"action": action, "audit_date": "2024-03-15", "description": "manual", **extra}
        assert api_client.post("/logs", json=body).status_code == 201

    def test_stats(self, api_client):
        self._log(api_client, item="Mouse")

        stats = api_client.get("/logs/stats", params={"days": 7}).json()

        assert stats["total_logs"] == 1
        assert stats["by_item"] == [{"item": "Mouse", "count": 1}]
        assert stats["period"] == 7

    def test_csv_export(self, api_client):
        self._log(api_client)

        response = api_client.get("/logs/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=\"change_log_" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert len(lines) == 2
        assert '"manual"' in lines[1]

    def test_json_export(self, api_client):
        self._log(api_client, "delete")

        body = api_client.get("/logs/export", params={"format": "json"}).json()

        assert body["total_records"] == 1
        assert body["filters"] == {}
        assert body["data"][0]["action"] == "delete"

    def test_unknown_format(self, api_client):
        assert api_client.get("/logs/export", params={"format": "xml"}).status_code == 422


# =============================================================================
# Reports
# =============================================================================


class TestReportRoutes:
    def _audit(self, api_client, audit_date, support):
        response = api_client.post(
            "/audits",
            json={
                "date": audit_date,
                "site": "Calamba",
                "items": {"Mouse": {"departments": {"Support": support}, "defectives": 1}},
                "departments": ["Support"],
            },
        )
        assert response.status_code == 201

    def test_monthly_summary(self, api_client):
        self._audit(api_client, "2024-03-05", 9)

        summary = api_client.get("/reports/monthly-summary", params={"month": 3, "year": 2024}).json()

        assert summary["audit_count"] == 1
        assert summary["total_units"] == 10
        assert summary["defect_rate"] == 10.0
        assert summary["item_totals"]["Mouse"] == 10

    def test_monthly_summary_needs_period(self, api_client):
        assert api_client.get("/reports/monthly-summary", params={"month": 3}).status_code == 422

    def test_item_trends(self, api_client):
        self._audit(api_client, "2024-03-05", 9)
        self._audit(api_client, "2024-03-06", 4)

        points = api_client.get("/reports/item-trends", params={"item": "Mouse"}).json()

        assert [(p["date"], p["total"]) for p in points] == [("2024-03-05", 10), ("2024-03-06", 5)]

    def test_department_reports(self, api_client):
        self._audit(api_client, "2024-03-05", 9)
        self._audit(api_client, "2024-03-06", 4)

        defects = api_client.get("/reports/defects-analysis").json()
        performance = api_client.get("/reports/department-performance").json()
        comparison = api_client.get(
            "/reports/department-comparison", params={"departments": "Support, Sales"}
        ).json()

        assert defects["defects_by_item"]["Mouse"] == 2
        assert performance["department_performance"]["Support"]["total_items"] == 13
        assert performance["report_period"] == {"month": None, "year": None}
        assert list(comparison["comparison"]) == ["Support"]
        assert comparison["comparison"]["Support"]["peak_day"] == {"date": "2024-03-05", "count": 9}
        assert comparison["comparison"]["Support"]["average_per_audit"] == 6.5


# =============================================================================
# Clipboard and single-station reads
# =============================================================================


class TestClipboardRoutes:
    def test_get_station_by_id(self, api_client):
        station = _create_station(api_client, 1, 10, 20)

        response = api_client.get(f"/stations/id/{station['id']}")

        assert response.json()["station_number"] == 1
        assert api_client.get("/stations/id/missing").status_code == 404

    def test_copy_stations_then_clone(self, api_client):
        station = _create_station(api_client, 1, 10, 20)

        clipboard = api_client.post("/stations/copy", json={"station_ids": [station["id"]]}).json()
        assert clipboard["type"] == "station"
        assert clipboard["items"][0]["display_number"] == 1

        ids = [item["id"] for item in clipboard["items"]]
        cloned = api_client.post("/stations/clone-multiple", json={"station_ids": ids}).json()
        assert cloned["cloned_stations"][0]["position"] == {"x": 110, "y": 70}

    def test_copy_and_paste_bays(self, api_client):
        bay = api_client.post(
            "/bays", json={"name": "A1", "device_type": "mouse", "position": {"x": 0, "y": 0}}
        ).json()["bay"]

        clipboard = api_client.post("/bays/copy", json={"bay_ids": [bay["id"]]}).json()
        response = api_client.post(
            "/bays/paste", json={"data": clipboard, "position": {"x": 20, "y": 0}}
        )

        assert response.status_code == 201
        pasted = response.json()["created_bays"][0]
        assert pasted["name"] == "A1_COPY"
        assert pasted["position"] == {"x": 20, "y": 0}
        assert pasted["metadata"]["copied_from"] == bay["id"]

    def test_paste_wrong_clipboard(self, api_client):
        response = api_client.post("/bays/paste", json={"data": {"type": "station", "items": []}})
        assert response.status_code == 400

    def test_copy_unknown_bays(self, api_client):
        assert api_client.post("/bays/copy", json={"bay_ids": ["missing"]}).status_code == 404
