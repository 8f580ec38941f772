"""FastAPI application for the flood-aware route planner."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from saferoute.config import DATA_DIR, DEFAULT_CENTER, HIGH_RISK_MIN
from saferoute.errors import ErrorKind, user_message
from saferoute.orchestrator import PlanningSession, RoutePlanner, SessionStateError, StartSource
from saferoute.orchestrator.messages import describe_session
from saferoute.routing import Coordinate, Warn
from saferoute.utils import attribute_table, get_layer_spec, load_layers

# Initialize FastAPI app
app = FastAPI(
    title="Flood-Aware Safe Route Planner",
    description="Driving routes that avoid high flood risk areas",
    version="1.0.0",
)

# Add CORS middleware for the map frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazily loaded singletons
_planner: Optional[RoutePlanner] = None
_layers: Optional[dict[str, dict]] = None


def get_planner() -> RoutePlanner:
    """Get or create the planner instance."""
    global _planner
    if _planner is None:
        _planner = RoutePlanner.from_data_dir(DATA_DIR)
    return _planner


def get_layers() -> dict[str, dict]:
    """Get or load the GeoJSON layers."""
    global _layers
    if _layers is None:
        _layers = load_layers(DATA_DIR)
    return _layers


# Request/Response models
class PointRequest(BaseModel):
    """A coordinate picked on the map or reported by the device."""
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)


class PositionRequest(PointRequest):
    """A live position update."""
    timestamp_ms: Optional[float] = None


class LocationFailure(str, Enum):
    DENIED = "denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"


class LocationErrorRequest(BaseModel):
    """Client-side geolocation failure."""
    reason: LocationFailure


_LOCATION_FAILURE_KINDS = {
    LocationFailure.DENIED: ErrorKind.LOCATION_DENIED,
    LocationFailure.UNAVAILABLE: ErrorKind.LOCATION_UNAVAILABLE,
    LocationFailure.TIMEOUT: ErrorKind.LOCATION_TIMEOUT,
}


def _session_response(session: PlanningSession) -> dict:
    body = session.to_dict()
    body["status"] = describe_session(session)
    if session.failure:
        body["failure"]["message"] = user_message(session.failure.kind)
    return body


def _find_session(session_id: str) -> PlanningSession:
    try:
        return get_planner().get_session(session_id)
    except KeyError:
        raise HTTPException(404, f"Unknown session: {session_id}")


# Endpoints
@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Flood-Aware Safe Route Planner",
        "version": "1.0.0",
        "center": {"lat": DEFAULT_CENTER[0], "lon": DEFAULT_CENTER[1]},
        "high_risk_min": HIGH_RISK_MIN,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/sessions")
async def create_session():
    """Start a new planning session."""
    return _session_response(get_planner().create_session())


@app.get("/sessions/{session_id}")
async def get_session(session_id: str):
    return _session_response(_find_session(session_id))


@app.post("/sessions/{session_id}/location")
async def report_location(session_id: str, request: PointRequest):
    """Use the device location as the start point."""
    _find_session(session_id)
    session = get_planner().set_start(session_id, request.to_coordinate(), StartSource.LOCATION)
    return _session_response(session)


@app.post("/sessions/{session_id}/location/error")
async def report_location_error(session_id: str, request: LocationErrorRequest):
    """Record a failed location fix and switch to manual picking."""
    _find_session(session_id)
    reason = user_message(_LOCATION_FAILURE_KINDS[request.reason])
    return _session_response(get_planner().enable_manual_mode(session_id, reason))


@app.post("/sessions/{session_id}/points")
async def select_point(session_id: str, request: PointRequest):
    """Handle a map pick (start in manual mode, otherwise end)."""
    _find_session(session_id)
    return _session_response(get_planner().select_point(session_id, request.to_coordinate()))


@app.put("/sessions/{session_id}/start")
async def set_start(session_id: str, request: PointRequest):
    _find_session(session_id)
    return _session_response(get_planner().set_start(session_id, request.to_coordinate()))


@app.put("/sessions/{session_id}/end")
async def set_end(session_id: str, request: PointRequest):
    _find_session(session_id)
    try:
        session = get_planner().set_end(session_id, request.to_coordinate())
    except SessionStateError as e:
        raise HTTPException(409, str(e))
    return _session_response(session)


@app.delete("/sessions/{session_id}/end")
async def clear_end(session_id: str):
    _find_session(session_id)
    return _session_response(get_planner().clear_end(session_id))


@app.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    _find_session(session_id)
    return _session_response(get_planner().reset(session_id))


@app.post("/sessions/{session_id}/route")
async def calculate_route(session_id: str):
    """
    Calculate a route avoiding high flood risk areas.

    Falls back to an unconstrained route when no avoiding route exists.
    """
    _find_session(session_id)
    try:
        session = await get_planner().calculate_route(session_id)
    except SessionStateError as e:
        raise HTTPException(409, str(e))
    return _session_response(session)


@app.post("/sessions/{session_id}/position")
async def update_position(session_id: str, request: PositionRequest):
    """Report a live position and get a proximity warning decision."""
    _find_session(session_id)
    planner = get_planner()
    decision = planner.update_position(session_id, request.to_coordinate(), now_ms=request.timestamp_ms)
    warn = isinstance(decision, Warn)
    return {
        "warning": warn,
        "distance_m": planner.warn_distance_m,
        "message": (
            f"You are within ~{planner.warn_distance_m:.0f} m of a high flood risk area."
            if warn else None
        ),
        "session": _session_response(planner.get_session(session_id)),
    }


@app.get("/sessions/{session_id}/google-maps")
async def google_maps_link(session_id: str):
    """Google Maps directions link following the planned route."""
    _find_session(session_id)
    try:
        return {"url": get_planner().directions_url(session_id)}
    except SessionStateError as e:
        raise HTTPException(409, str(e))


@app.get("/hazards/avoidance")
async def avoidance_geometry():
    """High-risk polygons as a GeoJSON MultiPolygon (null when none)."""
    geometry = get_planner().avoidance_geometry()
    return {"threshold": get_planner().threshold, "geometry": geometry.to_geojson() if geometry else None}


@app.get("/layers")
async def list_layers():
    layers = get_layers()
    return {
        "layers": [
            {"name": name, "features": len(data.get("features", []))}
            for name, data in layers.items()
        ]
    }


@app.get("/layers/{name}")
async def get_layer(name: str):
    layers = get_layers()
    if name not in layers:
        raise HTTPException(404, f"Layer not loaded: {name}")
    return layers[name]


@app.get("/layers/{name}/attributes")
async def get_layer_attributes(name: str, limit: int = 200):
    """Attribute table of a layer's key columns."""
    layers = get_layers()
    spec = get_layer_spec(name)
    if spec is None or name not in layers:
        raise HTTPException(404, f"Layer not loaded: {name}")
    return attribute_table(layers[name], spec.columns, limit=limit)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
