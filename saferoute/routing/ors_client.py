"""OpenRouteService (ORS) client for road-following routes with flood polygon avoidance."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from saferoute import config
from saferoute.errors import ErrorKind, GeometryError, SafeRouteError
from .geometry import (
    Coordinate,
    LineString,
    MultiLineString,
    MultiPolygon,
    RouteGeometry,
    geometry_from_geojson,
)

logger = logging.getLogger(__name__)

USER_AGENT = "SafeRoutePlanner/1.0"


class RoutingError(SafeRouteError):
    """A classified failure from the directions service."""

    def __init__(self, kind: ErrorKind, detail: str = "", status: int | None = None):
        super().__init__(kind, detail)
        self.status = status


@dataclass(frozen=True)
class RouteResult:
    """A computed driving route."""
    geometry: RouteGeometry
    distance_m: float = 0.0
    duration_s: float = 0.0
    steps: tuple[dict, ...] = field(default=(), compare=False)
    intersects_hazard: bool = False

    def to_dict(self) -> dict:
        return {
            "geometry": self.geometry.to_geojson(),
            "distance_m": self.distance_m,
            "duration_s": self.duration_s,
            "steps": list(self.steps),
            "intersects_hazard": self.intersects_hazard,
        }


def classify_status(status: int) -> ErrorKind:
    """Map an ORS HTTP status code onto a failure kind."""
    if status in (401, 403):
        return ErrorKind.AUTH_REJECTED
    if status == 404:
        return ErrorKind.ROUTE_NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status >= 500:
        return ErrorKind.SERVICE_UNAVAILABLE
    return ErrorKind.UNKNOWN


def build_request_body(
    start: Coordinate,
    end: Coordinate,
    avoidance: MultiPolygon | None = None,
    snap_radius_m: float | None = None,
) -> dict:
    """Build the ORS Directions v2 POST body."""
    radius = config.SNAP_RADIUS_M if snap_radius_m is None else snap_radius_m
    body: dict = {
        "coordinates": [start.to_lonlat(), end.to_lonlat()],
        "radiuses": [radius, radius],
    }
    if avoidance is not None:
        body["options"] = {"avoid_polygons": avoidance.to_geojson()}
    return body


def parse_route_response(data: dict) -> RouteResult:
    """
    Extract the first route from an ORS GeoJSON FeatureCollection.

    Raises:
        RoutingError: ROUTE_NOT_FOUND when there are no features, UNKNOWN
            when the feature is not a usable line.
    """
    features = data.get("features") if isinstance(data, dict) else None
    if not features:
        raise RoutingError(ErrorKind.ROUTE_NOT_FOUND, "ORS returned no features")
    if not isinstance(features, list) or not isinstance(features[0], dict):
        raise RoutingError(ErrorKind.UNKNOWN, "Malformed ORS feature list")

    feature = features[0]
    try:
        geometry = geometry_from_geojson(feature["geometry"])
    except (KeyError, TypeError, GeometryError) as e:
        raise RoutingError(ErrorKind.UNKNOWN, f"Malformed route geometry: {e}") from e
    if not isinstance(geometry, (LineString, MultiLineString)):
        raise RoutingError(ErrorKind.UNKNOWN, f"Route geometry is {type(geometry).__name__}")

    properties = _mapping(feature.get("properties"))
    summary = _mapping(properties.get("summary"))

    # Turn-by-turn steps from segments
    steps = []
    for segment in _sequence(properties.get("segments")):
        for step in _sequence(_mapping(segment).get("steps")):
            if not isinstance(step, dict):
                continue
            steps.append({
                "instruction": step.get("instruction", ""),
                "name": step.get("name", ""),
                "distance_m": step.get("distance", 0),
                "duration_s": step.get("duration", 0),
                "maneuver_type": str(step.get("type", "")),
            })

    try:
        distance_m = float(summary.get("distance", 0) or 0)
        duration_s = float(summary.get("duration", 0) or 0)
    except (TypeError, ValueError) as e:
        raise RoutingError(ErrorKind.UNKNOWN, f"Malformed route summary: {e}") from e

    return RouteResult(
        geometry=geometry,
        distance_m=distance_m,
        duration_s=duration_s,
        steps=tuple(steps),
    )


def _mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def _sequence(value) -> list:
    return value if isinstance(value, list) else []


def _post_directions(body: dict, api_key: str, timeout: float) -> dict:
    """Blocking POST to the ORS GeoJSON directions endpoint."""
    url = f"{config.ORS_BASE_URL}/{config.ORS_PROFILE}/geojson"
    req = Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        headers={
            "Authorization": api_key,
            "Content-Type": "application/json",
            "Accept": "application/json, application/geo+json",
            "User-Agent": USER_AGENT,
        },
        method="POST",
    )

    try:
        with urlopen(req, timeout=timeout) as resp:
            return json.loads(resp.read().decode())
    except HTTPError as e:
        # Keep the raw ORS error body for diagnostics only
        detail = ""
        try:
            detail = e.read().decode(errors="replace")
        except OSError:
            pass
        logger.warning("ORS request failed with HTTP %s: %s", e.code, detail)
        raise RoutingError(classify_status(e.code), detail, status=e.code) from e
    except OSError as e:
        # URLError, socket timeouts and dropped connections
        logger.warning("ORS request failed: %s", e)
        raise RoutingError(ErrorKind.SERVICE_UNAVAILABLE, str(e) or type(e).__name__) from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("ORS returned invalid JSON: %s", e)
        raise RoutingError(ErrorKind.UNKNOWN, str(e)) from e


async def request_route(
    start: Coordinate,
    end: Coordinate,
    avoidance: MultiPolygon | None = None,
    api_key: str | None = None,
) -> RouteResult:
    """
    Get a driving route from OpenRouteService.

    Args:
        start: Route origin.
        end: Route destination.
        avoidance: Optional MultiPolygon ORS should route around. ORS treats
            it as best effort; the returned route may still cross it.
        api_key: ORS key (falls back to config).

    Returns:
        RouteResult with geometry, distance and steps. Its intersects_hazard
        flag is left False; classification belongs to the caller.

    Raises:
        RoutingError: classified failure.
    """
    key = api_key if api_key is not None else config.ORS_API_KEY
    if not key:
        logger.warning("ORS_API_KEY not set, cannot call OpenRouteService")
        raise RoutingError(ErrorKind.MISSING_CREDENTIAL, "ORS_API_KEY not set")

    body = build_request_body(start, end, avoidance)

    # On guard timeout the worker thread is abandoned, not interrupted; it
    # stays in urlopen until ORS_REQUEST_TIMEOUT_S expires.
    try:
        data = await asyncio.wait_for(
            asyncio.to_thread(_post_directions, body, key, config.ORS_REQUEST_TIMEOUT_S),
            timeout=config.ORS_GUARD_TIMEOUT_S,
        )
    except asyncio.TimeoutError as e:
        logger.warning("ORS request exceeded guard timeout of %.0fs", config.ORS_GUARD_TIMEOUT_S)
        raise RoutingError(ErrorKind.SERVICE_UNAVAILABLE, "request timed out") from e

    result = parse_route_response(data)
    logger.info(
        "ORS route: %.2f km, %.0f min, avoidance=%s",
        result.distance_m / 1000, result.duration_s / 60, avoidance is not None,
    )
    return result
