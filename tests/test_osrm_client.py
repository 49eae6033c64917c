import httpx
import pytest

from src.routeviz.services.trips.osrm_client import OSRMClient, check_health, decode_polyline

# Encoded example from the polyline algorithm documentation.
SAMPLE_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
SAMPLE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def _client_with(handler, **kwargs) -> OSRMClient:
    client = OSRMClient(base_url="http://osrm.test", backoff_seconds=0.0, **kwargs)
    client._get_client = lambda: httpx.Client(transport=httpx.MockTransport(handler))
    return client


def test_decode_polyline():
    assert decode_polyline(SAMPLE_POLYLINE) == pytest.approx(SAMPLE_POINTS)
    assert decode_polyline("") == []


def test_route_builds_request_and_parses_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(
            200,
            json={"code": "Ok", "routes": [{"distance": 1234.5, "geometry": SAMPLE_POLYLINE}]},
        )

    leg = _client_with(handler, profile="driving").route((28.61, 77.21), (27.18, 78.01))

    assert leg.distance_m == 1234.5
    assert leg.geometry == pytest.approx(SAMPLE_POINTS)
    assert seen["url"].path == "/route/v1/driving/77.21,28.61;78.01,27.18"
    assert seen["url"].params["geometries"] == "polyline"
    assert seen["url"].params["overview"] == "full"


def test_route_retries_then_succeeds():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 10.0, "geometry": ""}]})

    leg = _client_with(handler, max_retries=2).route((0.0, 0.0), (0.0, 1.0))

    assert calls["count"] == 2
    assert leg.distance_m == 10.0


def test_route_without_result_raises_value_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route between points"})

    with pytest.raises(ValueError, match="Impossible route"):
        _client_with(handler, max_retries=0).route((0.0, 0.0), (0.0, 1.0))


def test_route_network_failure_raises_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ConnectionError):
        _client_with(handler, max_retries=1).route((0.0, 0.0), (0.0, 1.0))


def test_client_requires_base_url(monkeypatch):
    from src.routeviz.services.trips import osrm_client

    monkeypatch.setattr(osrm_client.settings, "osrm_base_url", None)
    with pytest.raises(ValueError):
        OSRMClient()


def test_check_health_without_url(monkeypatch):
    from src.routeviz.services.trips import osrm_client

    monkeypatch.setattr(osrm_client.settings, "osrm_base_url", None)
    assert check_health() is False
