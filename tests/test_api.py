"""End-to-end tests for the REST API through FastAPI's TestClient."""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ecoai.api.app import create_app
from ecoai.api.deps import get_db, get_today
from ecoai.api.routes import simulations as simulation_routes
from ecoai.exceptions import ScenarioSaveError

API = "/api/v1"


@pytest.fixture
def client(session, clock):
    app = create_app()

    def _db():
        yield session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_today] = lambda: clock
    return TestClient(app)


@pytest.fixture
def company_id(client):
    resp = client.post(f"{API}/companies", json={
        "name": "Acme Analytics",
        "region": "us",
        "base_ai_percentage": "0.30",
        "electricity_cost_per_kwh": "0.12",
        "currency": "USD",
    })
    assert resp.status_code == 201
    return resp.json()["id"]


class TestCompanies:

    def test_create_normalizes_region(self, client, company_id):
        body = client.get(f"{API}/companies/{company_id}").json()
        assert body["region"] == "US"
        assert Decimal(body["base_ai_percentage"]) == Decimal("0.30")

    def test_update_and_list(self, client, company_id):
        resp = client.put(f"{API}/companies/{company_id}", json={"name": "Acme AI"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Acme AI"
        assert resp.json()["region"] == "US"
        assert [c["name"] for c in client.get(f"{API}/companies").json()] == ["Acme AI"]

    def test_delete(self, client, company_id):
        assert client.delete(f"{API}/companies/{company_id}").status_code == 204
        assert client.get(f"{API}/companies/{company_id}").status_code == 404

    def test_unknown_company_is_404(self, client):
        resp = client.get(f"{API}/companies/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404
        assert "Company not found" in resp.json()["detail"]

    def test_invalid_ai_percentage_is_422(self, client):
        resp = client.post(f"{API}/companies", json={"name": "Bad", "base_ai_percentage": "1.5"})
        assert resp.status_code == 422


class TestEnergy:

    def test_record_with_department(self, client, company_id):
        dept = client.post(f"{API}/companies/{company_id}/departments", json={
            "name": "Machine Learning", "ai_usage_weight": "0.80",
        })
        assert dept.status_code == 201

        resp = client.post(f"{API}/companies/{company_id}/energy", json={
            "total_kwh": "1000",
            "usage_date": "2026-10-01",
            "department_id": dept.json()["id"],
        })

        assert resp.status_code == 201
        body = resp.json()
        assert Decimal(body["ai_attributed_kwh"]) == Decimal("240")
        assert Decimal(body["cost"]) == Decimal("120.00")
        assert Decimal(body["co2e_kg"]) == Decimal("92.64")
        assert body["data_source"] == "MANUAL"

    def test_csv_upload(self, client, company_id):
        content = b"date,total_kwh,department,region\n2026-10-01,1000,,EU-NORTH\nbad,row\n"
        resp = client.post(
            f"{API}/companies/{company_id}/energy/import",
            files={"file": ("usage.csv", content, "text/csv")},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["rows_imported"] == 1
        assert body["rows_skipped"] == 1
        assert body["records"][0]["region"] == "EU-NORTH"
        assert body["records"][0]["data_source"] == "CSV_IMPORT"

    def test_listing_filters(self, client, company_id):
        for day in ("2026-09-01", "2026-10-01"):
            client.post(f"{API}/companies/{company_id}/energy", json={"total_kwh": "10", "usage_date": day})

        everything = client.get(f"{API}/companies/{company_id}/energy").json()
        assert [u["usage_date"] for u in everything] == ["2026-10-01", "2026-09-01"]

        september = client.get(
            f"{API}/companies/{company_id}/energy",
            params={"start_date": "2026-09-01", "end_date": "2026-09-30"},
        ).json()
        assert [u["usage_date"] for u in september] == ["2026-09-01"]

        half_range = client.get(f"{API}/companies/{company_id}/energy", params={"start_date": "2026-09-01"})
        assert half_range.status_code == 400

    def test_attribution_preview(self, client, company_id):
        resp = client.get(
            f"{API}/companies/{company_id}/energy/attribution-preview", params={"total_kwh": "1000"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert Decimal(body["ai_kwh"]) == Decimal("300")
        assert "Formula:" in body["explanation"]

    def test_attribution_preview_rejects_foreign_department(self, client, company_id):
        other = client.post(f"{API}/companies", json={"name": "Other Co", "region": "US"}).json()
        foreign = client.post(
            f"{API}/companies/{other['id']}/departments", json={"name": "Research", "ai_usage_weight": "1"},
        ).json()

        resp = client.get(
            f"{API}/companies/{company_id}/energy/attribution-preview",
            params={"total_kwh": "1000", "department_id": foreign["id"]},
        )

        assert resp.status_code == 404
        assert "Department not found" in resp.json()["detail"]


class TestSimulations:

    def test_growth(self, client, company_id):
        resp = client.post(
            f"{API}/companies/{company_id}/simulations/growth",
            json={"growth_percent": "10", "months_ahead": 2},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["simulation_type"] == "GROWTH"
        assert Decimal(body["projected_ai_kwh"]) == Decimal("1210.00")
        assert Decimal(body["percent_change"]) == Decimal("21")

    def test_save_and_read_back(self, client, company_id):
        result = client.post(
            f"{API}/companies/{company_id}/simulations/efficiency", json={"efficiency_percent": "15"},
        ).json()

        saved = client.post(
            f"{API}/companies/{company_id}/simulations/scenarios",
            json={"name": "Quantization rollout", "result": result},
        )
        assert saved.status_code == 201
        scenario_id = saved.json()["id"]

        body = client.get(f"{API}/simulations/scenarios/{scenario_id}").json()
        assert body["name"] == "Quantization rollout"
        assert body["simulation_type"] == "EFFICIENCY"
        assert Decimal(body["results"]["projected_ai_kwh"]) == Decimal("850.00")
        assert body["parameters"]["schema_version"] == 1

        listed = client.get(f"{API}/companies/{company_id}/simulations/scenarios").json()
        assert [s["id"] for s in listed] == [scenario_id]

        assert client.delete(f"{API}/simulations/scenarios/{scenario_id}").status_code == 204
        assert client.get(f"{API}/simulations/scenarios/{scenario_id}").status_code == 404

    def test_save_failure_is_500(self, client, company_id, monkeypatch):
        def fail(*args, **kwargs):
            raise ScenarioSaveError("Failed to save scenario")

        monkeypatch.setattr(simulation_routes.SimulationEngine, "save_scenario", fail)
        result = client.post(
            f"{API}/companies/{company_id}/simulations/growth", json={"growth_percent": "5"},
        ).json()

        resp = client.post(f"{API}/companies/{company_id}/simulations/scenarios", json={"result": result})

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Failed to save scenario"}


class TestAlertsAndDashboard:

    def test_threshold_and_alert(self, client, company_id):
        resp = client.put(f"{API}/companies/{company_id}/alerts/thresholds", json={
            "metric_type": "AI_USAGE_KWH", "threshold_value": "1000",
        })
        assert resp.status_code == 200
        threshold_id = resp.json()["id"]

        client.post(f"{API}/companies/{company_id}/energy", json={
            "total_kwh": "3500", "usage_date": date(2026, 10, 3).isoformat(),
        })

        alerts = client.get(f"{API}/companies/{company_id}/alerts").json()
        assert len(alerts) == 1
        assert alerts[0]["severity"] == "CRITICAL"
        assert alerts[0]["is_triggered"] is True

        client.patch(f"{API}/alerts/thresholds/{threshold_id}", json={"active": False})
        assert client.get(f"{API}/companies/{company_id}/alerts").json() == []

    def test_insights(self, client, company_id):
        insights = client.get(f"{API}/companies/{company_id}/alerts/insights").json()
        assert [i["category"] for i in insights] == ["BATCHING", "EFFICIENCY", "CARBON_BUDGET"]

    def test_dashboard(self, client, company_id):
        client.post(f"{API}/companies/{company_id}/energy", json={"total_kwh": "1000", "usage_date": "2026-10-10"})

        body = client.get(f"{API}/companies/{company_id}/dashboard").json()

        assert Decimal(body["summary"]["ai_energy_kwh"]) == Decimal("300")
        assert len(body["trends"]) == 6
        assert len(body["forecasts"]) == 3
        assert body["region_breakdown"][0]["region_name"] == "United States"

    def test_carbon_defaults(self, client):
        defaults = client.get(f"{API}/carbon/defaults").json()
        assert len(defaults) == 20
        assert all(d["is_default"] for d in defaults)


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["db_connected"] is True
