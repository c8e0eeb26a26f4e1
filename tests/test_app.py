import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

import app as service
from categories import build_store
from models import CategoryStatus, LoadReport


@pytest.fixture()
def client():
    fresh = build_store()
    with patch.object(service, "store", fresh):
        with TestClient(service.app) as c:
            yield c


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"redis_ok": False, "categories": 7}


def test_nearby_king_soopers(client):
    resp = client.get("/nearby", params={"lat": 39.7316, "lng": -104.9739})
    assert resp.status_code == 200
    data = resp.json()
    grocery = data["categories"]["grocery_stores"]
    assert grocery["items"][0]["name"] == "King Soopers - Speer"
    assert grocery["items"][0]["distance"] == pytest.approx(0.0)
    assert grocery["radius_miles"] == 1.5
    assert data["categories"]["transit_stops"]["radius_miles"] == 0.25
    assert data["total"] == sum(c["match_count"] for c in data["categories"].values())
    assert set(data["categories"]) == {
        "site_development_plans", "construction", "rnos", "grocery_stores",
        "transit_stops", "libraries", "restaurants",
    }


def test_nearby_far_away_is_empty(client):
    data = client.get("/nearby", params={"lat": 0.0, "lng": 0.0}).json()
    assert data["total"] == 0
    assert all(c["items"] == [] for c in data["categories"].values())


@pytest.mark.parametrize("params", [{"lat": 39.7}, {"lat": "abc", "lng": -105.0}, {"lat": "nan", "lng": -105.0}])
def test_nearby_rejects_bad_coordinates(client, params):
    assert client.get("/nearby", params=params).status_code == 422


def test_categories(client):
    data = client.get("/categories").json()
    assert [c["key"] for c in data][:2] == ["site_development_plans", "construction"]
    assert all(c["item_count"] == 3 for c in data)


def test_status_before_any_load(client):
    data = client.get("/status").json()
    assert data["degraded"] is False
    assert data["categories"] == {}


def test_reload_returns_report(client):
    report = LoadReport(
        degraded=True,
        message="Loaded 1 categories. Live data unavailable; showing sample data for: RNOs.",
        categories={"rnos": CategoryStatus(key="rnos", status="error", item_count=3, error="rnos: down")},
    )
    with patch.object(service, "load_all", AsyncMock(return_value=report)) as mock_load:
        resp = client.post("/reload")
    assert resp.status_code == 200
    assert resp.json()["categories"]["rnos"]["status"] == "error"
    mock_load.assert_awaited_once()


def test_reload_failure_maps_to_500(client):
    with patch.object(service, "load_all", AsyncMock(side_effect=RuntimeError("bad"))):
        resp = client.post("/reload")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "reload_failed:RuntimeError"


def test_stats_without_redis(client):
    data = client.get("/stats").json()
    assert data["queries"] == 0
    assert "fallbacks" in data


def test_reload_waits_for_pending_startup_load():
    events = []
    report = LoadReport(degraded=False, message="Loaded 7 categories.", categories={})

    async def startup_load():
        await asyncio.sleep(0.05)
        events.append("startup")

    async def fake_load_all(_store, _sources):
        events.append("reload")
        return report

    async def main():
        task = asyncio.create_task(startup_load())
        with patch.object(service, "_load_task", task), \
                patch.object(service, "load_all", AsyncMock(side_effect=fake_load_all)):
            return await service.reload()

    assert asyncio.run(main()) == report
    assert events == ["startup", "reload"]
