"""Route/hazard intersection checks and live proximity warnings."""

import logging
import time
from dataclasses import dataclass

import pyproj
from shapely.errors import GEOSException
from shapely.geometry import Point as ShapelyPoint
from shapely.ops import transform

from saferoute.config import WARN_COOLDOWN_MS, WARNING_DISTANCE_M
from saferoute.errors import GeometryError
from .geometry import Coordinate, MultiPolygon, to_shapely
from .ors_client import RouteResult

logger = logging.getLogger(__name__)

_GEOMETRY_ERRORS = (GEOSException, GeometryError, ValueError, TypeError, AttributeError)


def intersects_hazard(route: RouteResult | None, avoidance: MultiPolygon | None) -> bool:
    """
    Check whether a route touches or crosses any high-risk polygon.

    Returns False when there is nothing to check against, and also when the
    geometry engine fails; the failure is logged.
    """
    if avoidance is None or route is None or route.geometry is None:
        return False

    try:
        line = to_shapely(route.geometry)
        hazard = to_shapely(avoidance)
        return bool(line.intersects(hazard))
    except _GEOMETRY_ERRORS as e:
        logger.warning("Route/hazard intersection check failed: %s", e)
        return False


@dataclass(frozen=True)
class NoWarning:
    """Position is clear, or a warning was raised too recently."""


@dataclass(frozen=True)
class Warn:
    """Position is within the warning distance of high-risk areas."""
    timestamp_ms: float


WarnDecision = NoWarning | Warn


def _utm_projectors(lon: float, lat: float):
    zone = int((lon + 180) / 6) + 1
    epsg = (32700 if lat < 0 else 32600) + zone
    fwd = pyproj.Transformer.from_crs("EPSG:4326", f"EPSG:{epsg}", always_xy=True).transform
    inv = pyproj.Transformer.from_crs(f"EPSG:{epsg}", "EPSG:4326", always_xy=True).transform
    return fwd, inv


def within_distance(position: Coordinate, avoidance: MultiPolygon, distance_m: float) -> bool:
    """
    Test whether a position lies inside a metre buffer around the avoidance area.

    The buffer is computed in the UTM zone of the position.

    Raises:
        GEOSException, GeometryError, ValueError: on geometry failures.
    """
    fwd, _ = _utm_projectors(position.lon, position.lat)
    hazard_xy = transform(fwd, to_shapely(avoidance))
    point_xy = transform(fwd, ShapelyPoint(position.lon, position.lat))
    return bool(hazard_xy.buffer(distance_m).covers(point_xy))


def check_proximity(
    position: Coordinate,
    avoidance: MultiPolygon | None,
    last_warn_ms: float | None,
    cooldown_ms: float = WARN_COOLDOWN_MS,
    warn_distance_m: float = WARNING_DISTANCE_M,
    now_ms: float | None = None,
) -> WarnDecision:
    """
    Decide whether a live position should raise a flood proximity warning.

    Args:
        position: Current position.
        avoidance: High-risk geometry, or None.
        last_warn_ms: Timestamp of the previous warning, None if never warned.
        cooldown_ms: Minimum gap between warnings.
        warn_distance_m: Buffer distance around high-risk areas.
        now_ms: Current time in milliseconds (defaults to wall clock).

    Returns:
        Warn(now_ms) when the position is within the buffer and the cooldown
        has elapsed, NoWarning otherwise.
    """
    if avoidance is None:
        return NoWarning()

    now = time.time() * 1000 if now_ms is None else now_ms
    if last_warn_ms is not None and now - last_warn_ms < cooldown_ms:
        return NoWarning()

    try:
        near = within_distance(position, avoidance, warn_distance_m)
    except _GEOMETRY_ERRORS as e:
        logger.warning("Proximity check failed: %s", e)
        return NoWarning()

    if near:
        logger.info(
            "Position (%.5f, %.5f) within %.0f m of high flood risk",
            position.lat, position.lon, warn_distance_m,
        )
        return Warn(timestamp_ms=now)
    return NoWarning()
