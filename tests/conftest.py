"""Shared fixtures for the route planner tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from saferoute.routing import HazardCollection, LineString, RouteResult


def square(west: float, south: float, size: float) -> list:
    """Closed GeoJSON ring of an axis-aligned square."""
    east, north = west + size, south + size
    return [[west, south], [east, south], [east, north], [west, north], [west, south]]


@pytest.fixture
def hazard_geojson():
    """One severity-5 square, one severity-2 square and one feature without severity."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"gridcode": 5},
                "geometry": {"type": "Polygon", "coordinates": [square(35.205, 31.905, 0.01)]},
            },
            {
                "type": "Feature",
                "properties": {"gridcode": 2},
                "geometry": {"type": "Polygon", "coordinates": [square(35.30, 31.80, 0.01)]},
            },
            {
                "type": "Feature",
                "properties": {},
                "geometry": {"type": "Polygon", "coordinates": [square(35.40, 31.70, 0.01)]},
            },
        ],
    }


@pytest.fixture
def hazards(hazard_geojson):
    return HazardCollection.from_geojson(hazard_geojson)


@pytest.fixture
def crossing_route():
    """Straight line from (31.90, 35.20) to (31.92, 35.22) through the severity-5 square."""
    return RouteResult(
        geometry=LineString(((35.20, 31.90), (35.22, 31.92))),
        distance_m=2900.0,
        duration_s=300.0,
    )


@pytest.fixture
def clear_route():
    """Line running about 1 km north of the severity-5 square."""
    return RouteResult(
        geometry=LineString(((35.20, 31.925), (35.22, 31.925))),
        distance_m=1900.0,
        duration_s=240.0,
    )
