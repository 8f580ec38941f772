from .orchestrator import RoutePlanner
from .session import (
    PlanningSession,
    RouteClassification,
    RouteFailure,
    RouteSuccess,
    SessionState,
    SessionStateError,
    StartSource,
)

__all__ = [
    "RoutePlanner",
    "PlanningSession",
    "RouteClassification",
    "RouteFailure",
    "RouteSuccess",
    "SessionState",
    "SessionStateError",
    "StartSource",
]
