import threading
from collections import OrderedDict

import pytest

from src.routeviz.models.domain import Location
from src.routeviz.services.geospatial import haversine_m
from src.routeviz.services.trips import distance_matrix as matrix_module
from src.routeviz.services.trips import service as trip_service
from src.routeviz.services.trips.models import RouteLeg, StaleResultError, TripPlanningError
from src.routeviz.services.trips.service import TripPlanner, plan_trip


def _location(lid: str, lat: float, lng: float) -> Location:
    return Location(id=lid, name=f"{lid}, India", lat=lat, lng=lng)


CITIES = [
    _location("delhi", 28.6139, 77.2090),
    _location("agra", 27.1767, 78.0081),
    _location("jaipur", 26.9124, 75.7873),
    _location("chandigarh", 30.7333, 76.7794),
]


def straight_provider(origin, destination):
    return RouteLeg(distance_m=haversine_m(*origin, *destination), geometry=[origin, destination])


def test_plan_returns_complete_tour():
    planner = TripPlanner(provider=straight_provider, max_parallel=1)
    plan = planner.plan(CITIES, "delhi")

    tour = plan.tour
    assert plan.request_token == 1
    assert tour.order[0] == "delhi"
    assert sorted(tour.order) == sorted(city.id for city in CITIES)
    assert [loc.order for loc in tour.ordered_locations] == [1, 2, 3, 4]
    assert tour.total_distance > 0
    assert tour.path[0] == (28.6139, 77.2090)
    assert tour.path[-1] == (28.6139, 77.2090)
    assert plan.fallback_pairs == []


def test_provider_failures_never_abort_planning():
    def broken(origin, destination):
        raise ConnectionError("offline")

    plan = TripPlanner(provider=broken, max_parallel=1).plan(CITIES, "agra")

    assert len(plan.fallback_pairs) == len(CITIES) * (len(CITIES) - 1)
    assert sorted(plan.tour.order) == sorted(city.id for city in CITIES)


def test_tokens_increase_per_request():
    planner = TripPlanner(provider=straight_provider, max_parallel=1)
    first = planner.plan(CITIES, "delhi")
    second = planner.plan(CITIES, "jaipur")

    assert second.request_token > first.request_token
    assert planner.is_current(second.request_token)
    assert not planner.is_current(first.request_token)
    assert planner.latest_token == second.request_token


def test_superseded_request_raises_stale_result():
    started = threading.Event()
    release = threading.Event()

    def slow_provider(origin, destination):
        started.set()
        release.wait(timeout=5)
        return straight_provider(origin, destination)

    planner = TripPlanner(provider=slow_provider, max_parallel=1)
    outcome = {}

    def first_request():
        try:
            planner.plan(CITIES[:2], "delhi")
        except StaleResultError as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=first_request)
    worker.start()
    assert started.wait(timeout=5)
    newer = planner.begin_request()
    release.set()
    worker.join(timeout=5)

    assert isinstance(outcome.get("error"), StaleResultError)
    assert outcome["error"].latest == newer


def test_validation_errors():
    planner = TripPlanner(provider=straight_provider)

    with pytest.raises(TripPlanningError):
        planner.plan(CITIES, "mumbai")
    with pytest.raises(TripPlanningError):
        planner.plan([CITIES[0], CITIES[0]], "delhi")


def test_too_many_locations_rejected(monkeypatch):
    monkeypatch.setattr(trip_service.settings, "max_trip_locations", 3)
    with pytest.raises(TripPlanningError):
        TripPlanner(provider=straight_provider).plan(CITIES, "delhi")


def test_single_location_gives_empty_tour():
    plan = TripPlanner(provider=straight_provider).plan(CITIES[:1], "delhi")

    assert plan.tour.is_empty


def test_plan_trip_shares_planner_per_session(monkeypatch):
    monkeypatch.setattr(matrix_module, "default_provider", lambda: straight_provider)
    monkeypatch.setattr(trip_service, "_planners", OrderedDict())

    first = plan_trip(CITIES, "delhi", session_id="tab-1")
    second = plan_trip(CITIES, "delhi", session_id="tab-1")
    other = plan_trip(CITIES, "delhi", session_id="tab-2")

    assert (first.request_token, second.request_token, other.request_token) == (1, 2, 1)
    assert first.tour.order == second.tour.order


def test_least_recent_session_is_evicted(monkeypatch):
    monkeypatch.setattr(matrix_module, "default_provider", lambda: straight_provider)
    monkeypatch.setattr(trip_service, "_planners", OrderedDict())
    monkeypatch.setattr(trip_service.settings, "max_planner_sessions", 2)

    plan_trip(CITIES[:2], "delhi", session_id="s1")
    plan_trip(CITIES[:2], "delhi", session_id="s2")
    # touching s1 makes s2 the oldest
    assert plan_trip(CITIES[:2], "delhi", session_id="s1").request_token == 2
    plan_trip(CITIES[:2], "delhi", session_id="s3")

    assert list(trip_service._planners) == ["s1", "s3"]
    # s2 starts over with a fresh planner
    assert plan_trip(CITIES[:2], "delhi", session_id="s2").request_token == 1
    assert list(trip_service._planners) == ["s3", "s2"]


def test_session_registry_stays_bounded(monkeypatch):
    monkeypatch.setattr(matrix_module, "default_provider", lambda: straight_provider)
    monkeypatch.setattr(trip_service, "_planners", OrderedDict())
    monkeypatch.setattr(trip_service.settings, "max_planner_sessions", 5)

    for index in range(50):
        plan_trip(CITIES[:2], "delhi", session_id=f"tab-{index}")

    assert len(trip_service._planners) == 5
    assert list(trip_service._planners) == [f"tab-{index}" for index in range(45, 50)]


def test_plan_carries_distance_matrix_and_summary():
    plan = TripPlanner(provider=straight_provider, max_parallel=1).plan(CITIES, "delhi")

    assert set(plan.distance_matrix) == {city.id for city in CITIES}
    assert "delhi" not in plan.distance_matrix["delhi"]
    assert plan.distance_matrix["delhi"]["agra"] == pytest.approx(
        haversine_m(28.6139, 77.2090, 27.1767, 78.0081)
    )
    assert plan.stop_count == 4
    assert plan.average_distance == pytest.approx(plan.tour.total_distance / 4)
