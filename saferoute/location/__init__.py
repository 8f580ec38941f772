from .base_provider import GeolocationProvider, LocationError, LocationFix, request_location_fix
from .providers import ReplayLocationProvider, StaticLocationProvider

__all__ = [
    "GeolocationProvider",
    "LocationError",
    "LocationFix",
    "request_location_fix",
    "ReplayLocationProvider",
    "StaticLocationProvider",
]
