from .layers import (
    LAYER_SPECS,
    attribute_table,
    get_layer_spec,
    load_geojson,
    load_layers,
    rain_classes,
)

__all__ = [
    "LAYER_SPECS",
    "attribute_table",
    "get_layer_spec",
    "load_geojson",
    "load_layers",
    "rain_classes",
]
