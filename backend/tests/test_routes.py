"""
Tests for the reading API.
"""
from datetime import timedelta

import pytest

from bplog.storage import SqlReadingStore, StorageUnavailable


def add(client, clock, when=None, **body):
    """Post a reading as if it were entered at `when`."""
    if when is not None:
        saved, clock.now = clock.now, when
    response = client.post("/api/readings", json=body)
    if when is not None:
        clock.now = saved
    assert response.status_code == 201, response.get_json()
    return response.get_json()


class TestCreateReading:

    def test_create(self, client):
        response = client.post("/api/readings", json={
            "systolic": 150, "diastolic": 95, "pulse": 80, "notes": "after stairs", "category": "Evening",
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data["id"] == 1
        assert data["severity"] == "High"
        assert data["category"] == "evening"
        assert data["recorded_at"] == "2024-06-15T14:30:00+00:00"

    def test_validation_error_saves_nothing(self, client):
        response = client.post("/api/readings", json={"systolic": 90, "diastolic": 100})
        assert response.status_code == 400
        assert response.get_json() == {
            "error": "Systolic value must be higher than diastolic value",
            "code": "invalid_relation",
            "field": "diastolic",
        }
        assert client.get("/api/readings?range=all").get_json()["total_count"] == 0

    def test_missing_field(self, client):
        response = client.post("/api/readings", json={"systolic": 120})
        assert response.status_code == 400
        assert response.get_json()["code"] == "missing_field"

    def test_requires_json(self, client):
        response = client.post("/api/readings", data="systolic=120", content_type="text/plain")
        assert response.status_code == 415

    def test_body_must_be_an_object(self, client):
        response = client.post("/api/readings", json=[120, 80])
        assert response.status_code == 400


class TestListReadings:

    def test_filters_by_range_newest_first(self, client, clock):
        add(client, clock, clock.now - timedelta(days=8), systolic=120, diastolic=80)
        add(client, clock, clock.now - timedelta(days=2), systolic=130, diastolic=85)
        add(client, clock, clock.now - timedelta(hours=1), systolic=141, diastolic=70)

        data = client.get("/api/readings?range=week").get_json()
        assert data["range"] == "week"
        assert data["total_count"] == 2
        assert [r["systolic"] for r in data["readings"]] == [141, 130]
        assert [r["severity"] for r in data["readings"]] == ["High", "Elevated"]

    def test_default_range_is_month(self, client, clock):
        add(client, clock, clock.now - timedelta(days=31), systolic=120, diastolic=80)
        add(client, clock, clock.now - timedelta(days=29), systolic=121, diastolic=80)
        data = client.get("/api/readings").get_json()
        assert data["range"] == "month"
        assert data["total_count"] == 1

    def test_limit(self, client, clock):
        for minutes in range(5):
            add(client, clock, clock.now - timedelta(minutes=minutes), systolic=120 + minutes, diastolic=80)
        data = client.get("/api/readings?range=today&limit=2").get_json()
        assert data["total_count"] == 5
        assert [r["systolic"] for r in data["readings"]] == [120, 121]

    def test_unknown_range(self, client):
        response = client.get("/api/readings?range=decade")
        assert response.status_code == 400
        assert "Invalid range" in response.get_json()["error"]

    def test_grouped_by_day(self, client, clock):
        add(client, clock, clock.now - timedelta(days=1), systolic=120, diastolic=80)
        add(client, clock, clock.now - timedelta(hours=2), systolic=125, diastolic=80)
        add(client, clock, clock.now - timedelta(hours=1), systolic=128, diastolic=80)

        days = client.get("/api/readings/grouped?range=week").get_json()["days"]
        assert [d["date"] for d in days] == ["2024-06-15", "2024-06-14"]
        assert [r["systolic"] for r in days[0]["readings"]] == [128, 125]


class TestDeleteReadings:

    def test_delete_one(self, client, clock):
        first = add(client, clock, systolic=120, diastolic=80)
        add(client, clock, systolic=130, diastolic=85)

        assert client.delete(f"/api/readings/{first['id']}").status_code == 204
        remaining = client.get("/api/readings?range=all").get_json()["readings"]
        assert [r["systolic"] for r in remaining] == [130]

    def test_delete_unknown_id(self, client, clock):
        add(client, clock, systolic=120, diastolic=80)
        assert client.delete("/api/readings/404").status_code == 204
        assert client.get("/api/readings?range=all").get_json()["total_count"] == 1

    def test_delete_negative_id(self, client, clock):
        add(client, clock, systolic=120, diastolic=80)
        assert client.delete("/api/readings/-1").status_code == 204
        assert client.get("/api/readings?range=all").get_json()["total_count"] == 1

    def test_delete_all(self, client, clock):
        add(client, clock, systolic=120, diastolic=80)
        add(client, clock, systolic=130, diastolic=85)
        response = client.delete("/api/readings")
        assert response.get_json() == {"deleted": 2}
        assert client.get("/api/readings?range=all").get_json()["total_count"] == 0


class TestLatest:

    def test_no_readings(self, client):
        assert client.get("/api/readings/latest").status_code == 404

    def test_newest_reading(self, client, clock):
        add(client, clock, clock.now - timedelta(hours=3), systolic=118, diastolic=75)
        add(client, clock, clock.now - timedelta(days=3), systolic=150, diastolic=95)
        data = client.get("/api/readings/latest").get_json()
        assert data["systolic"] == 118
        assert data["severity"] == "Optimal"


class TestStatsAndTrends:

    def test_stats_empty(self, client):
        data = client.get("/api/stats?range=week").get_json()
        assert data == {"range": "week", "systolic": None, "diastolic": None, "pulse": None,
                        "count": 0, "pulse_count": 0}

    def test_stats(self, client, clock):
        add(client, clock, clock.now - timedelta(days=1), systolic=120, diastolic=80, pulse=60)
        add(client, clock, clock.now - timedelta(days=2), systolic=140, diastolic=90)
        add(client, clock, clock.now - timedelta(days=40), systolic=200, diastolic=120, pulse=100)

        data = client.get("/api/stats?range=month").get_json()
        assert (data["systolic"], data["diastolic"], data["pulse"]) == (130, 85, 60)
        assert (data["count"], data["pulse_count"]) == (2, 1)

    def test_trends(self, client, clock):
        add(client, clock, clock.now - timedelta(days=1, hours=2), systolic=120, diastolic=80, pulse=60)
        add(client, clock, clock.now - timedelta(days=1, hours=1), systolic=130, diastolic=90, pulse=70)
        add(client, clock, clock.now, systolic=140, diastolic=90)

        days = client.get("/api/trends?range=week").get_json()["days"]
        assert days == [
            {"date": "2024-06-14", "systolic": 125, "diastolic": 85, "pulse": 65, "count": 2},
            {"date": "2024-06-15", "systolic": 140, "diastolic": 90, "pulse": None, "count": 1},
        ]


class TestCsv:

    def test_export(self, client, clock):
        add(client, clock, systolic=120, diastolic=80, pulse=70, notes='a "quoted" note')
        response = client.get("/api/export/csv")
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "blood-pressure-2024-06-15.csv" in response.headers["Content-Disposition"]
        assert response.get_data(as_text=True) == (
            '"Date","Systolic","Diastolic","Pulse","Notes"\n'
            '"2024-06-15T14:30","120","80","70","a ""quoted"" note"\n'
        )

    def test_import(self, client):
        text = "Systolic,Diastolic,Pulse,Notes\n120,80,70,ok\nbad,80,,x\n90,100,,y\n"
        response = client.post("/api/import/csv", json={"csv": text})
        assert response.status_code == 200
        assert response.get_json() == {"imported": 1, "skipped": 1, "rejected": 1}
        readings = client.get("/api/readings?range=today").get_json()["readings"]
        assert [(r["systolic"], r["notes"]) for r in readings] == [(120, "ok")]

    def test_import_requires_csv_string(self, client):
        assert client.post("/api/import/csv", json={"file": "x"}).status_code == 400

    def test_import_bad_header(self, client):
        response = client.post("/api/import/csv", json={"csv": "a,b\n1,2\n"})
        assert response.status_code == 400
        assert "Systolic" in response.get_json()["error"]

    def test_import_with_broken_row_keeps_good_rows(self, client):
        text = "Systolic,Diastolic,Notes\n120,80,ok\n130,85,\"" + "x" * 200_000 + "\n125,80,fine\n"
        response = client.post("/api/import/csv", json={"csv": text})
        assert response.status_code == 200
        assert response.get_json() == {"imported": 1, "skipped": 1, "rejected": 0}

    def test_export_then_import_restores_values(self, client, clock):
        add(client, clock, clock.now - timedelta(days=3), systolic=131, diastolic=84, pulse=66)
        add(client, clock, clock.now - timedelta(days=1), systolic=122, diastolic=79, notes="x, y")
        exported = client.get("/api/export/csv").get_data(as_text=True)

        client.delete("/api/readings")
        client.post("/api/import/csv", json={"csv": exported})

        readings = client.get("/api/readings?range=all").get_json()["readings"]
        assert sorted((r["systolic"], r["diastolic"], r["pulse"], r["notes"]) for r in readings) == [
            (122, 79, None, "x, y"),
            (131, 84, 66, None),
        ]
        # Imported readings carry the import time, not the exported dates
        assert {r["recorded_at"] for r in readings} == {"2024-06-15T14:30:00+00:00"}


def test_pdf_report(client, clock):
    add(client, clock, clock.now - timedelta(days=1), systolic=150, diastolic=95, pulse=80)
    response = client.get("/api/export/pdf?range=week")
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")


def test_pdf_report_unknown_range(client):
    assert client.get("/api/export/pdf?range=forever").status_code == 400


@pytest.mark.parametrize("method, path", [
    ("get", "/api/readings"),
    ("get", "/api/stats"),
    ("get", "/api/export/csv"),
])
def test_storage_failure_is_retryable(client, monkeypatch, method, path):
    def unavailable(self):
        raise StorageUnavailable("Could not load readings. Please try again.")

    monkeypatch.setattr(SqlReadingStore, "get_all", unavailable)
    response = getattr(client, method)(path)
    assert response.status_code == 503
    assert response.get_json() == {"error": "Could not load readings. Please try again.",
                                   "retryable": True}


def test_health(client):
    assert client.get("/health").get_json() == {"status": "healthy"}


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
