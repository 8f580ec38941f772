from .geometry import (
    Coordinate,
    LineString,
    MultiLineString,
    MultiPolygon,
    Point,
    Polygon,
    geometry_from_geojson,
    to_shapely,
)
from .hazard_polygons import HazardCollection, HazardFeature, build_avoidance_geometry
from .ors_client import RouteResult, RoutingError, request_route
from .risk import NoWarning, Warn, WarnDecision, check_proximity, intersects_hazard
from .google_maps import build_directions_url

__all__ = [
    "Coordinate",
    "LineString",
    "MultiLineString",
    "MultiPolygon",
    "Point",
    "Polygon",
    "geometry_from_geojson",
    "to_shapely",
    "HazardCollection",
    "HazardFeature",
    "build_avoidance_geometry",
    "RouteResult",
    "RoutingError",
    "request_route",
    "NoWarning",
    "Warn",
    "WarnDecision",
    "check_proximity",
    "intersects_hazard",
    "build_directions_url",
]
