"""Short status lines describing a planning session."""

from saferoute.errors import user_message
from .session import PlanningSession, RouteClassification, SessionState


def _km(distance_m: float) -> str:
    return f"{distance_m / 1000:.2f} km"


def describe_session(session: PlanningSession) -> str:
    """Return a one-line status for the session's current state."""
    state = session.state

    if state == SessionState.IDLE:
        return "Session not started."
    if state == SessionState.AWAITING_START:
        if session.manual_mode:
            reason = f"{session.manual_reason} " if session.manual_reason else ""
            return f"{reason}Manual mode: pick the start point, then the end point."
        return "Locating you to use as the start point..."
    if state == SessionState.AWAITING_END:
        return "Start point set. Pick the end point."
    if state == SessionState.READY:
        return "Ready. Calculate the route."
    if state == SessionState.COMPUTING:
        return "Calculating the safe route..."
    if state == SessionState.FAILED:
        kind_text = user_message(session.failure.kind) if session.failure else ""
        return f"Route calculation failed. {kind_text}".strip()

    distance = _km(session.result.distance_m) if session.result else "unknown length"
    classification = session.classification
    if classification == RouteClassification.SAFE:
        return f"Safe route found: {distance}."
    if classification == RouteClassification.SAFE_TOUCHING:
        return f"Relatively safe route found: {distance}. It may touch high flood risk areas."
    if classification == RouteClassification.UNSAFE:
        return f"Available route: {distance}. It passes through high flood risk areas."
    return f"Available route: {distance}. It may not fully avoid flood risk."
