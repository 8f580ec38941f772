"""Error taxonomy shared by the routing, location and planning layers."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure conditions surfaced to the planner."""
    MISSING_CREDENTIAL = "missing_credential"
    AUTH_REJECTED = "auth_rejected"
    ROUTE_NOT_FOUND = "route_not_found"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    LOCATION_DENIED = "location_denied"
    LOCATION_UNAVAILABLE = "location_unavailable"
    LOCATION_TIMEOUT = "location_timeout"
    GEOMETRY_COMPUTATION_ERROR = "geometry_computation_error"
    UNKNOWN = "unknown"


USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MISSING_CREDENTIAL: "The routing service is not configured: no ORS API key is set.",
    ErrorKind.AUTH_REJECTED: "The routing service rejected the ORS API key.",
    ErrorKind.ROUTE_NOT_FOUND: (
        "No road route was found between the two points. "
        "Pick a point closer to a clear street and try again."
    ),
    ErrorKind.RATE_LIMITED: "The routing service usage limit was reached. Try again shortly.",
    ErrorKind.SERVICE_UNAVAILABLE: "The routing service is temporarily unavailable. Try again later.",
    ErrorKind.LOCATION_DENIED: "Location permission was denied. Pick the start point on the map.",
    ErrorKind.LOCATION_UNAVAILABLE: "Your location is unavailable. Pick the start point on the map.",
    ErrorKind.LOCATION_TIMEOUT: "Locating you took too long. Pick the start point on the map.",
    ErrorKind.GEOMETRY_COMPUTATION_ERROR: "Hazard geometry could not be evaluated for this route.",
    ErrorKind.UNKNOWN: "The route could not be calculated. Try again.",
}


def user_message(kind: ErrorKind) -> str:
    """Return the display text for an error kind."""
    return USER_MESSAGES.get(kind, USER_MESSAGES[ErrorKind.UNKNOWN])


class SafeRouteError(Exception):
    """Base class for classified failures carrying an ErrorKind."""

    def __init__(self, kind: ErrorKind, detail: str = ""):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail

    @property
    def user_message(self) -> str:
        return user_message(self.kind)


class GeometryError(ValueError):
    """Raised when GeoJSON cannot be converted into a supported geometry."""
