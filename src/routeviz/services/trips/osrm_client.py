"""HTTP client for the OSRM route service."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings
from .models import Coordinate, RouteLeg

logger = logging.getLogger(__name__)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds

    def _get_client(self) -> httpx.Client:
        # One client per call so pair queries can run on worker threads.
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)))

    def route(self, origin: Coordinate, destination: Coordinate) -> RouteLeg:
        """Road distance and geometry between two (lat, lng) points.

        Raises:
            ValueError: OSRM answered without a usable route.
            ConnectionError: the service could not be reached after retries.
            httpx.HTTPError: any other transport failure after retries.
        """
        # OSRM expects "lon,lat;lon,lat"
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in (origin, destination))
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    return _parse_route(response.json())
                except (httpx.TimeoutException, httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to reach OSRM service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        "OSRM network error, retrying in %.1fs (attempt %d/%d): %s",
                        wait_time, attempt, self.max_retries, e,
                    )
                    time.sleep(wait_time)
                except (httpx.HTTPError, ValueError):
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()

    def __call__(self, origin: Coordinate, destination: Coordinate) -> RouteLeg:
        return self.route(origin, destination)


def _parse_route(data: dict) -> RouteLeg:
    if data.get("code") != "Ok":
        raise ValueError(f"OSRM route request failed: {data.get('message', data.get('code', 'unknown error'))}")
    routes = data.get("routes") or []
    if not routes:
        raise ValueError("OSRM returned no route.")
    best = routes[0]
    return RouteLeg(distance_m=float(best["distance"]), geometry=decode_polyline(best.get("geometry") or ""))


def decode_polyline(polyline: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode a Google-encoded polyline into (lat, lng) pairs."""
    coordinates: list[tuple[float, float]] = []
    factor = 10 ** precision
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        deltas = []
        for _ in range(2):
            shift = 0
            result = 0
            while True:
                b = ord(polyline[index]) - 63
                index += 1
                result |= (b & 0x1f) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += deltas[0]
        lon += deltas[1]
        coordinates.append((lat / factor, lon / factor))

    return coordinates


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM availability with a short two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        client = OSRMClient(base_url=base, timeout=5.0, max_retries=0)
        # Berlin test coordinates, served by public and self-hosted instances alike
        client.route((52.517037, 13.388860), (52.496891, 13.385983))
        return True
    except (httpx.HTTPError, ConnectionError, ValueError, KeyError):
        return False
