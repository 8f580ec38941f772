"""Geometry variants and conversions to/from GeoJSON and shapely."""

from dataclasses import dataclass
from typing import Union

from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from saferoute.errors import GeometryError

# GeoJSON positions are [lon, lat]; a ring is a closed list of positions.
Position = tuple[float, float]
Ring = tuple[Position, ...]


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 location in degrees."""
    lat: float
    lon: float

    def to_lonlat(self) -> list[float]:
        return [self.lon, self.lat]

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, data: dict) -> "Coordinate":
        return cls(lat=float(data["lat"]), lon=float(data["lon"]))


def _position(raw) -> Position:
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        raise GeometryError(f"Invalid position: {raw!r}")
    try:
        return (float(raw[0]), float(raw[1]))
    except (TypeError, ValueError) as e:
        raise GeometryError(f"Invalid position: {raw!r}") from e


def _ring(raw) -> Ring:
    if not isinstance(raw, (list, tuple)):
        raise GeometryError(f"Invalid ring: {raw!r}")
    return tuple(_position(p) for p in raw)


def _line(raw) -> tuple[Position, ...]:
    if not isinstance(raw, (list, tuple)):
        raise GeometryError(f"Invalid line: {raw!r}")
    return tuple(_position(p) for p in raw)


def _polygon_rings(raw) -> tuple[Ring, ...]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise GeometryError(f"Invalid polygon: {raw!r}")
    return tuple(_ring(r) for r in raw)


def _listify(seq) -> list:
    if seq and not isinstance(seq[0], (tuple, list)):
        return list(seq)
    return [_listify(s) for s in seq]


@dataclass(frozen=True)
class Point:
    position: Position

    def to_geojson(self) -> dict:
        return {"type": "Point", "coordinates": list(self.position)}

    @classmethod
    def from_coordinate(cls, coord: Coordinate) -> "Point":
        return cls((coord.lon, coord.lat))


@dataclass(frozen=True)
class LineString:
    positions: tuple[Position, ...]

    def to_geojson(self) -> dict:
        return {"type": "LineString", "coordinates": _listify(self.positions)}


@dataclass(frozen=True)
class MultiLineString:
    lines: tuple[tuple[Position, ...], ...]

    def to_geojson(self) -> dict:
        return {"type": "MultiLineString", "coordinates": _listify(self.lines)}


@dataclass(frozen=True)
class Polygon:
    """Outer ring first, then holes."""
    rings: tuple[Ring, ...]

    def to_geojson(self) -> dict:
        return {"type": "Polygon", "coordinates": _listify(self.rings)}


@dataclass(frozen=True)
class MultiPolygon:
    polygons: tuple[Polygon, ...]

    def to_geojson(self) -> dict:
        return {
            "type": "MultiPolygon",
            "coordinates": [_listify(p.rings) for p in self.polygons],
        }


Geometry = Union[Point, LineString, MultiLineString, Polygon, MultiPolygon]
RouteGeometry = Union[LineString, MultiLineString]


def geometry_from_geojson(data: dict) -> Geometry:
    """
    Build a geometry variant from a GeoJSON geometry object.

    Raises:
        GeometryError: if the object is not a supported, well-formed geometry.
    """
    if not isinstance(data, dict):
        raise GeometryError(f"Geometry must be an object, got {type(data).__name__}")

    gtype = data.get("type")
    coords = data.get("coordinates")
    if not isinstance(coords, (list, tuple)):
        raise GeometryError(f"{gtype} geometry has no coordinate array")

    if gtype == "Point":
        return Point(_position(coords))
    if gtype == "LineString":
        return LineString(_line(coords))
    if gtype == "MultiLineString":
        return MultiLineString(tuple(_line(line) for line in coords))
    if gtype == "Polygon":
        return Polygon(_polygon_rings(coords))
    if gtype == "MultiPolygon":
        return MultiPolygon(tuple(Polygon(_polygon_rings(p)) for p in coords))

    raise GeometryError(f"Unsupported geometry type: {gtype!r}")


def to_shapely(geometry: Geometry) -> BaseGeometry:
    """Convert a geometry variant to a shapely geometry."""
    return shape(geometry.to_geojson())
