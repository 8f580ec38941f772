"""Tests for the FastAPI service."""

import pytest
from fastapi.testclient import TestClient

from saferoute.api import main as api_main
from saferoute.errors import ErrorKind
from saferoute.orchestrator import RoutePlanner
from saferoute.routing import RoutingError


@pytest.fixture
def client(hazards, clear_route, hazard_geojson):
    """Client backed by a planner whose first routing attempt fails, then succeeds."""
    responses = [RoutingError(ErrorKind.ROUTE_NOT_FOUND, "raw ORS body"), clear_route]

    async def requester(start, end, avoidance):
        response = responses.pop(0) if responses else clear_route
        if isinstance(response, Exception):
            raise response
        return response

    api_main._planner = RoutePlanner(hazards=hazards, route_requester=requester)
    api_main._layers = {"flood": hazard_geojson}
    yield TestClient(api_main.app)
    api_main._planner = None
    api_main._layers = None


def new_session(client) -> str:
    response = client.post("/sessions")
    assert response.status_code == 200
    return response.json()["id"]


class TestSessionEndpoints:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_unknown_session(self, client):
        assert client.get("/sessions/nope").status_code == 404

    def test_location_then_route(self, client):
        session_id = new_session(client)

        body = client.post(f"/sessions/{session_id}/location", json={"lat": 31.90, "lon": 35.20}).json()
        assert body["state"] == "awaiting_end"
        assert body["start_source"] == "location"

        body = client.post(f"/sessions/{session_id}/points", json={"lat": 31.92, "lon": 35.22}).json()
        assert body["state"] == "ready"

        body = client.post(f"/sessions/{session_id}/route").json()
        assert body["state"] == "resolved"
        assert body["classification"] == "unconstrained_safe"
        assert body["result"]["geometry"]["type"] == "LineString"
        assert "raw ORS body" not in str(body)

        url = client.get(f"/sessions/{session_id}/google-maps").json()["url"]
        assert url.startswith("https://www.google.com/maps/dir/")

    def test_manual_mode_after_location_error(self, client):
        session_id = new_session(client)

        body = client.post(f"/sessions/{session_id}/location/error", json={"reason": "denied"}).json()
        assert body["manual_mode"] is True

        body = client.post(f"/sessions/{session_id}/points", json={"lat": 31.90, "lon": 35.20}).json()
        assert body["start"] == {"lat": 31.90, "lon": 35.20}
        assert body["state"] == "awaiting_end"

    def test_route_without_points_conflicts(self, client):
        session_id = new_session(client)
        assert client.post(f"/sessions/{session_id}/route").status_code == 409

    def test_end_without_start_conflicts(self, client):
        session_id = new_session(client)
        response = client.put(f"/sessions/{session_id}/end", json={"lat": 31.92, "lon": 35.22})
        assert response.status_code == 409

    def test_invalid_latitude_rejected(self, client):
        session_id = new_session(client)
        response = client.put(f"/sessions/{session_id}/start", json={"lat": 120, "lon": 35.2})
        assert response.status_code == 422

    def test_clear_end_and_reset(self, client):
        session_id = new_session(client)
        client.put(f"/sessions/{session_id}/start", json={"lat": 31.90, "lon": 35.20})
        client.put(f"/sessions/{session_id}/end", json={"lat": 31.92, "lon": 35.22})

        body = client.delete(f"/sessions/{session_id}/end").json()
        assert body["state"] == "awaiting_end"
        assert body["end"] is None

        body = client.post(f"/sessions/{session_id}/reset").json()
        assert body["state"] == "awaiting_start"
        assert body["start"] is None

    def test_position_warning(self, client):
        session_id = new_session(client)

        body = client.post(
            f"/sessions/{session_id}/position",
            json={"lat": 31.91, "lon": 35.21, "timestamp_ms": 100000},
        ).json()
        assert body["warning"] is True

        body = client.post(
            f"/sessions/{session_id}/position",
            json={"lat": 31.91, "lon": 35.21, "timestamp_ms": 105000},
        ).json()
        assert body["warning"] is False


class TestDataEndpoints:
    def test_avoidance_geometry(self, client):
        body = client.get("/hazards/avoidance").json()
        assert body["threshold"] == 4
        assert body["geometry"]["type"] == "MultiPolygon"
        assert len(body["geometry"]["coordinates"]) == 1

    def test_layers(self, client):
        assert client.get("/layers").json() == {"layers": [{"name": "flood", "features": 3}]}
        assert client.get("/layers/soil").status_code == 404

    def test_layer_attributes(self, client):
        body = client.get("/layers/flood/attributes").json()
        assert body["columns"] == ["gridcode"]
        assert body["rows"] == [[5], [2], [None]]
