"""Google Maps hand-off links for a planned route."""

from urllib.parse import urlencode

from .geometry import Coordinate, LineString, MultiLineString, RouteGeometry

GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir/"
MAX_WAYPOINTS = 10


def _flatten(geometry: RouteGeometry | None) -> list[tuple[float, float]]:
    if isinstance(geometry, LineString):
        return list(geometry.positions)
    if isinstance(geometry, MultiLineString):
        return [p for line in geometry.lines for p in line]
    return []


def sample_waypoints(
    geometry: RouteGeometry | None,
    max_waypoints: int = MAX_WAYPOINTS,
) -> list[Coordinate]:
    """Pick up to max_waypoints evenly spaced interior points of a route."""
    positions = _flatten(geometry)
    if len(positions) < 2:
        return []

    step = max(1, len(positions) // (max_waypoints + 1))
    waypoints = []
    i = step
    while i < len(positions) - 1 and len(waypoints) < max_waypoints:
        lon, lat = positions[i]
        waypoints.append(Coordinate(lat=lat, lon=lon))
        i += step
    return waypoints


def build_directions_url(
    start: Coordinate,
    end: Coordinate,
    geometry: RouteGeometry | None = None,
) -> str:
    """
    Build a Google Maps driving directions URL.

    Waypoints sampled from the route geometry keep Google close to the
    planned path; without geometry only origin and destination are sent.
    """
    params = {
        "api": "1",
        "origin": f"{start.lat},{start.lon}",
        "destination": f"{end.lat},{end.lon}",
        "travelmode": "driving",
    }
    waypoints = sample_waypoints(geometry)
    if waypoints:
        params["waypoints"] = "|".join(f"{w.lat},{w.lon}" for w in waypoints)
    return f"{GOOGLE_MAPS_DIR_URL}?{urlencode(params)}"
