from collections import OrderedDict

import pytest
from fastapi.testclient import TestClient

from src.routeviz.main import create_app
from src.routeviz.services.geospatial import haversine_m
from src.routeviz.services.trips import distance_matrix as matrix_module
from src.routeviz.services.trips import service as trip_service
from src.routeviz.services.trips.models import RouteLeg


class DummyOSRM:
    def __call__(self, origin, destination):
        return RouteLeg(distance_m=haversine_m(*origin, *destination) * 1.2, geometry=[origin, destination])


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(matrix_module, "default_provider", lambda: DummyOSRM())
    monkeypatch.setattr(trip_service, "_planners", OrderedDict())
    return TestClient(create_app())


TRIP_LOCATIONS = [
    {"id": "delhi", "name": "New Delhi, Delhi, India", "lat": 28.6139, "lng": 77.2090},
    {"id": "agra", "name": "Agra, Uttar Pradesh, India", "lat": 27.1767, "lng": 78.0081},
    {"id": "jaipur", "name": "Jaipur, Rajasthan, India", "lat": 26.9124, "lng": 75.7873},
]


def test_root_and_health(api_client: TestClient):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}


def test_demo_graph_round_trip_through_shortest_path(api_client: TestClient):
    demo = api_client.get("/api/graph/demo").json()
    assert len(demo["nodes"]) == 5

    response = api_client.post(
        "/api/graph/shortest-path",
        json={
            "nodes": demo["nodes"],
            "edges": demo["edges"],
            "source_id": demo["source_id"],
            "target_id": demo["target_id"],
            "metric": "cost",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["path"] == ["node-demo-1", "node-demo-2", "node-demo-3"]
    assert body["path_labels"] == ["Node 1", "Node 2", "Node 3"]
    assert body["distance"] == pytest.approx(12.0)
    assert body["distance_label"] == "12.0"
    assert body["no_path_found"] is False
    assert body["steps"][0]["current_node"] == "node-demo-1"
    assert body["steps"][-1]["current_node"] == "node-demo-3"
    assert body["steps"][0]["table"][0]["status"] == "Current"


def test_unreachable_target_is_not_an_error(api_client: TestClient):
    response = api_client.post(
        "/api/graph/shortest-path",
        json={
            "nodes": [{"id": "A", "label": "A"}, {"id": "B", "label": "B"}],
            "edges": [],
            "source_id": "A",
            "target_id": "B",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["no_path_found"] is True
    assert body["path"] == []
    assert body["distance"] is None
    assert body["distance_label"] == "∞"
    assert len(body["steps"]) == 2


def test_shortest_path_input_errors(api_client: TestClient):
    nodes = [{"id": "A", "label": "A"}, {"id": "B", "label": "B"}]
    missing_source = api_client.post(
        "/api/graph/shortest-path", json={"nodes": nodes, "source_id": "Z", "target_id": "B"}
    )
    duplicate_edges = api_client.post(
        "/api/graph/shortest-path",
        json={
            "nodes": nodes,
            "edges": [
                {"id": "e1", "source": "A", "target": "B", "cost": 1},
                {"id": "e2", "source": "B", "target": "A", "cost": 2},
            ],
            "source_id": "A",
            "target_id": "B",
        },
    )
    bad_metric = api_client.post(
        "/api/graph/shortest-path", json={"nodes": nodes, "source_id": "A", "target_id": "B", "metric": "speed"}
    )

    assert missing_source.status_code == 404
    assert duplicate_edges.status_code == 400
    assert bad_metric.status_code == 422


def test_plan_trip(api_client: TestClient):
    response = api_client.post("/api/trips/plan", json={"locations": TRIP_LOCATIONS, "start_id": "delhi"})

    assert response.status_code == 200
    body = response.json()
    assert body["ordered_locations"][0]["id"] == "delhi"
    assert [loc["order"] for loc in body["ordered_locations"]] == [1, 2, 3]
    assert len(body["segments"]) == 3
    assert body["segments"][-1]["to_id"] == "delhi"
    assert body["total_distance_km"] == pytest.approx(body["total_distance_m"] / 1000.0)
    assert body["strategy"] == "nearest_neighbor+2opt"
    assert body["fallback_pairs"] == []
    matrix = body["distance_matrix"]
    assert set(matrix) == {"delhi", "agra", "jaipur"}
    assert set(matrix["delhi"]) == {"agra", "jaipur"}
    assert matrix["agra"]["jaipur"] > 0
    assert body["stop_count"] == 3
    assert body["average_distance_km"] == pytest.approx(body["total_distance_km"] / 3)


def test_plan_trip_unknown_start(api_client: TestClient):
    response = api_client.post("/api/trips/plan", json={"locations": TRIP_LOCATIONS, "start_id": "mumbai"})

    assert response.status_code == 400


def test_plan_trip_csv(api_client: TestClient):
    response = api_client.post("/api/trips/plan.csv", json={"locations": TRIP_LOCATIONS, "start_id": "agra"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("leg,from_id")
    assert len(lines) == 4


def test_plan_trip_csv_unexpected_error_is_500(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from src.routeviz.api.routes import trips as trip_routes

    def broken_plan(*args, **kwargs):
        raise RuntimeError("matrix build crashed")

    monkeypatch.setattr(trip_routes, "plan_trip", broken_plan)
    response = api_client.post("/api/trips/plan.csv", json={"locations": TRIP_LOCATIONS, "start_id": "agra"})

    assert response.status_code == 500
    assert "Failed to export trip plan" in response.json()["detail"]
