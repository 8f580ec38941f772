"""Planning session state and the transitions between states.

Every transition takes a PlanningSession and returns a new one; nothing here
performs I/O. RoutePlanner applies these transitions to its session store.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum

from saferoute.errors import ErrorKind
from saferoute.routing.geometry import Coordinate
from saferoute.routing.ors_client import RouteResult

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_START = "awaiting_start"
    AWAITING_END = "awaiting_end"
    READY = "ready"
    COMPUTING = "computing"
    RESOLVED = "resolved"
    FAILED = "failed"


class RouteClassification(str, Enum):
    """How a resolved route relates to high-risk flood areas."""
    SAFE = "safe"
    SAFE_TOUCHING = "safe_touching"
    UNCONSTRAINED_SAFE = "unconstrained_safe"
    UNSAFE = "unsafe"


class StartSource(str, Enum):
    LOCATION = "location"
    MANUAL = "manual"


class SessionStateError(Exception):
    """Raised when an operation is not valid in the session's current state."""


@dataclass(frozen=True)
class RouteSuccess:
    result: RouteResult
    attempted_with_avoidance: bool


@dataclass(frozen=True)
class RouteFailure:
    kind: ErrorKind
    detail: str = ""


RoutingAttemptOutcome = RouteSuccess | RouteFailure

# States from which a calculation may start
CALCULABLE_STATES = {SessionState.READY, SessionState.RESOLVED, SessionState.FAILED}


@dataclass(frozen=True)
class PlanningSession:
    """Snapshot of one user's route planning session."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: SessionState = SessionState.IDLE
    start: Coordinate | None = None
    end: Coordinate | None = None
    start_source: StartSource | None = None
    manual_mode: bool = False
    manual_reason: str = ""
    result: RouteResult | None = None
    classification: RouteClassification | None = None
    attempted_with_avoidance: bool = False
    failure: RouteFailure | None = None
    generation: int = 0
    last_warn_ms: float | None = None
    last_position: Coordinate | None = None

    @property
    def is_computing(self) -> bool:
        return self.state == SessionState.COMPUTING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "state": self.state.value,
            "start": self.start.to_dict() if self.start else None,
            "end": self.end.to_dict() if self.end else None,
            "start_source": self.start_source.value if self.start_source else None,
            "manual_mode": self.manual_mode,
            "manual_reason": self.manual_reason,
            "result": self.result.to_dict() if self.result else None,
            "classification": self.classification.value if self.classification else None,
            "attempted_with_avoidance": self.attempted_with_avoidance,
            "failure": {
                "kind": self.failure.kind.value,
            } if self.failure else None,
            "last_position": self.last_position.to_dict() if self.last_position else None,
        }


def _points_state(start: Coordinate | None, end: Coordinate | None) -> SessionState:
    if start is None:
        return SessionState.AWAITING_START
    if end is None:
        return SessionState.AWAITING_END
    return SessionState.READY


def _cleared(session: PlanningSession, **changes) -> PlanningSession:
    """Apply changes, drop any route outcome and derive the point-collection state."""
    updated = replace(
        session,
        result=None,
        classification=None,
        attempted_with_avoidance=False,
        failure=None,
        **changes,
    )
    return replace(updated, state=_points_state(updated.start, updated.end))


def begin(session: PlanningSession) -> PlanningSession:
    """Start collecting points."""
    if session.state != SessionState.IDLE:
        return session
    return replace(session, state=SessionState.AWAITING_START)


def fix_start(
    session: PlanningSession,
    coordinate: Coordinate,
    source: StartSource = StartSource.MANUAL,
) -> PlanningSession:
    """Set the start point. Ignored while a route is computing."""
    if session.is_computing:
        logger.debug("Session %s: start change ignored while computing", session.id)
        return session
    changes = {"start": coordinate, "start_source": source}
    if source == StartSource.LOCATION:
        changes.update(manual_mode=False, manual_reason="")
    return _cleared(session, **changes)


def enable_manual_mode(session: PlanningSession, reason: str = "") -> PlanningSession:
    """Switch to manual point picking after a failed or absent location fix."""
    if session.manual_mode:
        return session
    updated = replace(session, manual_mode=True, manual_reason=reason)
    if updated.state == SessionState.IDLE:
        updated = replace(updated, state=SessionState.AWAITING_START)
    return updated


def set_end(session: PlanningSession, coordinate: Coordinate) -> PlanningSession:
    """
    Set the end point and discard any prior result.

    Raises:
        SessionStateError: if no start point has been fixed yet.
    """
    if session.is_computing:
        logger.debug("Session %s: end change ignored while computing", session.id)
        return session
    if session.start is None:
        raise SessionStateError("Start point must be set before the end point")
    return _cleared(session, end=coordinate)


def select_point(session: PlanningSession, coordinate: Coordinate) -> PlanningSession:
    """
    Interpret a map pick.

    In manual mode the first pick sets the start and later picks set the
    end. Otherwise the start comes from location, picks set the end, and a
    pick before the first fix is ignored.
    """
    if session.is_computing:
        return session
    if session.start is None:
        if session.manual_mode:
            return fix_start(session, coordinate, StartSource.MANUAL)
        logger.debug("Session %s: waiting for location fix, pick ignored", session.id)
        return session
    return set_end(session, coordinate)


def clear_end(session: PlanningSession) -> PlanningSession:
    """Remove the end point and any route."""
    if session.is_computing:
        return session
    return _cleared(session, end=None)


def reset(session: PlanningSession) -> PlanningSession:
    """Clear the session and invalidate any in-flight calculation."""
    return PlanningSession(
        id=session.id,
        state=SessionState.AWAITING_START,
        generation=session.generation + 1,
    )


def start_computing(session: PlanningSession) -> PlanningSession:
    """
    Enter COMPUTING. A session already computing is returned unchanged.

    Raises:
        SessionStateError: if start or end is missing.
    """
    if session.is_computing:
        return session
    if session.state not in CALCULABLE_STATES or session.start is None or session.end is None:
        raise SessionStateError(
            f"Cannot calculate a route in state {session.state.value}: start and end are required"
        )
    return replace(
        session,
        state=SessionState.COMPUTING,
        result=None,
        classification=None,
        attempted_with_avoidance=False,
        failure=None,
    )


def resolve(
    session: PlanningSession,
    outcome: RouteSuccess,
    classification: RouteClassification,
) -> PlanningSession:
    return replace(
        session,
        state=SessionState.RESOLVED,
        result=outcome.result,
        classification=classification,
        attempted_with_avoidance=outcome.attempted_with_avoidance,
        failure=None,
    )


def fail(session: PlanningSession, failure: RouteFailure) -> PlanningSession:
    return replace(
        session,
        state=SessionState.FAILED,
        result=None,
        classification=None,
        failure=failure,
    )
