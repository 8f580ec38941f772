"""Loading of hazard and context GeoJSON layers from the data directory."""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path

from saferoute.config import FLOOD_LAYER_FILE

logger = logging.getLogger(__name__)

ATTRIBUTE_ROW_LIMIT = 200


@dataclass(frozen=True)
class LayerSpec:
    """A named GeoJSON layer and the attribute columns worth tabulating."""
    name: str
    filename: str
    columns: tuple[str, ...] = ()
    required: bool = False


LAYER_SPECS: tuple[LayerSpec, ...] = (
    LayerSpec("flood", FLOOD_LAYER_FILE, ("gridcode",), required=True),
    LayerSpec("zones", "Ramallh_zones.json", ("Name_Engli",)),
    LayerSpec("roads", "Roads.json"),
    LayerSpec("soil", "soil_new.json", ("DIS", "Soil_Risk")),
    LayerSpec("rain", "rain.json", ("Rain_Max", "Rain_Min")),
    LayerSpec("slope", "slop.json", ("gridcode",)),
    LayerSpec("elevation", "elev.json", ("gridcode",)),
    LayerSpec("flow_accumulation", "flow_acu.json", ("gridcode",)),
)


def load_geojson(path: str | Path) -> dict:
    """Load a GeoJSON FeatureCollection from disk."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ValueError(f"{path} is not a GeoJSON FeatureCollection")
    return data


def load_layers(data_dir: str | Path, specs: tuple[LayerSpec, ...] = LAYER_SPECS) -> dict[str, dict]:
    """
    Load every available layer.

    Optional layers that are missing or malformed are logged and skipped.

    Raises:
        FileNotFoundError, ValueError: when a required layer cannot be loaded.
    """
    data_dir = Path(data_dir)
    layers: dict[str, dict] = {}

    for spec in specs:
        path = data_dir / spec.filename
        try:
            layers[spec.name] = load_geojson(path)
        except (OSError, ValueError) as e:
            if spec.required:
                raise
            logger.warning("%s layer not loaded: %s", spec.name, e)
            continue
        logger.info("Loaded %s layer (%d features)", spec.name, len(layers[spec.name]["features"]))

    return layers


def get_layer_spec(name: str) -> LayerSpec | None:
    for spec in LAYER_SPECS:
        if spec.name == name:
            return spec
    return None


def attribute_table(
    geojson: dict,
    columns: tuple[str, ...] | list[str],
    limit: int = ATTRIBUTE_ROW_LIMIT,
) -> dict:
    """
    Tabulate selected feature properties.

    Returns:
        {"columns": [...], "rows": [[...], ...], "total": n, "truncated": bool}
    """
    features = geojson.get("features") or []
    rows = []
    for feature in features[:limit]:
        props = feature.get("properties") or {}
        rows.append([props.get(col) for col in columns])

    return {
        "columns": list(columns),
        "rows": rows,
        "total": len(features),
        "truncated": len(features) > limit,
    }


def rain_classes(geojson: dict, prop: str = "Rain_Max") -> list[int]:
    """
    Bin each feature's rainfall maximum into classes 1-5.

    Values are normalised against the layer's min/max and cut at every 20%.
    Non-numeric values, and flat layers, fall in the middle class.
    """
    values = []
    for feature in geojson.get("features") or []:
        raw = (feature.get("properties") or {}).get(prop)
        try:
            value = float(raw)
        except (TypeError, ValueError):
            value = math.nan
        values.append(value)

    finite = [v for v in values if math.isfinite(v)]
    low = min(finite) if finite else 0.0
    high = max(finite) if finite else 0.0

    classes = []
    for v in values:
        if not math.isfinite(v) or high == low:
            classes.append(3)
            continue
        t = (v - low) / (high - low)
        if t <= 0.2:
            classes.append(1)
        elif t <= 0.4:
            classes.append(2)
        elif t <= 0.6:
            classes.append(3)
        elif t <= 0.8:
            classes.append(4)
        else:
            classes.append(5)
    return classes
