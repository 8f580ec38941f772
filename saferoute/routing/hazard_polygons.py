"""Flood hazard features and the avoidance geometry built from them."""

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from saferoute.config import HIGH_RISK_MIN
from saferoute.errors import GeometryError
from .geometry import MultiPolygon, Polygon, geometry_from_geojson

logger = logging.getLogger(__name__)

# Attribute holding the 1-5 risk class in the flood layer
SEVERITY_PROPERTY = "gridcode"


def parse_severity(value) -> float | None:
    """
    Parse a severity attribute into a number.

    Accepts ints, floats and numeric strings. Booleans, non-numeric strings,
    NaN and infinities are invalid and return None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True)
class HazardFeature:
    """A flood risk area with its severity class."""
    geometry: Polygon | MultiPolygon | None
    severity: float | None
    properties: dict = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_geojson(cls, feature: dict) -> "HazardFeature":
        """Build a feature; unsupported or malformed geometry becomes None."""
        properties = feature.get("properties")
        if not isinstance(properties, dict):
            properties = {}
        geometry = None
        raw_geometry = feature.get("geometry")
        if raw_geometry:
            try:
                parsed = geometry_from_geojson(raw_geometry)
            except GeometryError as e:
                logger.warning("Skipping hazard geometry: %s", e)
            else:
                if isinstance(parsed, (Polygon, MultiPolygon)):
                    geometry = parsed
        return cls(
            geometry=geometry,
            severity=parse_severity(properties.get(SEVERITY_PROPERTY)),
            properties=dict(properties),
        )


@dataclass(frozen=True)
class HazardCollection:
    """Ordered, read-only set of hazard features loaded for the session."""
    features: tuple[HazardFeature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)

    @classmethod
    def from_geojson(cls, data: dict) -> "HazardCollection":
        if not isinstance(data, dict):
            raise GeometryError("Hazard data must be a GeoJSON FeatureCollection")
        features = data.get("features") or []
        return cls(tuple(HazardFeature.from_geojson(f) for f in features if isinstance(f, dict)))

    @classmethod
    def from_file(cls, path: str | Path) -> "HazardCollection":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        collection = cls.from_geojson(data)
        logger.info("Loaded %d hazard features from %s", len(collection), path)
        return collection

    def severity_counts(self) -> dict[int, int]:
        """Count features per integer severity class (invalid severities skipped)."""
        counts: dict[int, int] = {}
        for feature in self.features:
            if feature.severity is None:
                continue
            key = int(feature.severity)
            counts[key] = counts.get(key, 0) + 1
        return counts


def build_avoidance_geometry(
    hazards: HazardCollection | None,
    threshold: float = HIGH_RISK_MIN,
) -> MultiPolygon | None:
    """
    Collect high-risk polygons into a single MultiPolygon for ORS avoidance.

    Args:
        hazards: Loaded hazard features.
        threshold: Minimum severity (inclusive) treated as high risk.

    Returns:
        MultiPolygon holding every polygon of every feature with
        severity >= threshold (multi-polygon members are flattened), or
        None if nothing qualifies.
    """
    if not hazards:
        return None

    polygons: list[Polygon] = []

    for feature in hazards:
        if feature.severity is None or feature.severity < threshold:
            continue

        geom = feature.geometry
        if isinstance(geom, Polygon):
            polygons.append(geom)
        elif isinstance(geom, MultiPolygon):
            polygons.extend(geom.polygons)

    if not polygons:
        return None

    logger.debug("Avoidance geometry: %d polygons at severity >= %s", len(polygons), threshold)
    return MultiPolygon(tuple(polygons))
