"""Route planning orchestrator for flood-aware driving routes."""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from pathlib import Path

from saferoute.config import (
    DATA_DIR,
    FLOOD_LAYER_FILE,
    HIGH_RISK_MIN,
    WARN_COOLDOWN_MS,
    WARNING_DISTANCE_M,
)
from saferoute.errors import ErrorKind, user_message
from saferoute.location import GeolocationProvider, LocationError, request_location_fix
from saferoute.routing import (
    Coordinate,
    HazardCollection,
    MultiPolygon,
    NoWarning,
    RouteResult,
    RoutingError,
    Warn,
    WarnDecision,
    build_avoidance_geometry,
    build_directions_url,
    check_proximity,
    intersects_hazard,
    request_route,
)
from . import session as transitions
from .session import (
    PlanningSession,
    RouteClassification,
    RouteFailure,
    RouteSuccess,
    RoutingAttemptOutcome,
    SessionState,
    StartSource,
)

logger = logging.getLogger(__name__)

RouteRequester = Callable[[Coordinate, Coordinate, MultiPolygon | None], Awaitable[RouteResult]]


class RoutePlanner:
    """
    Coordinates planning sessions against the hazard data and ORS.

    Holds the loaded hazard collection and a store of sessions. All session
    changes go through the transition functions in session.py; this class
    adds the I/O: location fixes, route requests and proximity checks.
    """

    def __init__(
        self,
        hazards: HazardCollection | None = None,
        route_requester: RouteRequester = request_route,
        threshold: float = HIGH_RISK_MIN,
        cooldown_ms: float = WARN_COOLDOWN_MS,
        warn_distance_m: float = WARNING_DISTANCE_M,
    ):
        """
        Initialize the planner.

        Args:
            hazards: Flood hazard features (empty when not yet loaded)
            route_requester: Coroutine function fetching a route, request_route by default
            threshold: Minimum severity treated as high risk
            cooldown_ms: Minimum gap between proximity warnings
            warn_distance_m: Proximity warning distance
        """
        self.hazards = hazards or HazardCollection()
        self.route_requester = route_requester
        self.threshold = threshold
        self.cooldown_ms = cooldown_ms
        self.warn_distance_m = warn_distance_m
        self.sessions: dict[str, PlanningSession] = {}

    @classmethod
    def from_data_dir(cls, data_dir: str | Path | None = None, **kwargs) -> "RoutePlanner":
        """Create a planner with the flood layer loaded from disk."""
        path = Path(data_dir or DATA_DIR) / FLOOD_LAYER_FILE
        return cls(hazards=HazardCollection.from_file(path), **kwargs)

    # ------------------------------------------------------------------
    # Hazards
    # ------------------------------------------------------------------

    def load_hazards(self, hazards: HazardCollection) -> None:
        """Replace the hazard snapshot used by later calculations."""
        self.hazards = hazards
        logger.info("Hazard snapshot replaced (%d features)", len(hazards))

    def avoidance_geometry(self) -> MultiPolygon | None:
        return build_avoidance_geometry(self.hazards, self.threshold)

    # ------------------------------------------------------------------
    # Session store
    # ------------------------------------------------------------------

    def create_session(self) -> PlanningSession:
        session = transitions.begin(PlanningSession())
        self.sessions[session.id] = session
        logger.info("Session %s created", session.id)
        return session

    def get_session(self, session_id: str) -> PlanningSession:
        """
        Raises:
            KeyError: if the session does not exist
        """
        return self.sessions[session_id]

    def delete_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)

    def _store(self, session: PlanningSession) -> PlanningSession:
        previous = self.sessions.get(session.id)
        if previous is not None and previous.state != session.state:
            logger.debug("Session %s: %s -> %s", session.id, previous.state.value, session.state.value)
        self.sessions[session.id] = session
        return session

    # ------------------------------------------------------------------
    # Point selection
    # ------------------------------------------------------------------

    def set_start(
        self,
        session_id: str,
        coordinate: Coordinate,
        source: StartSource = StartSource.MANUAL,
    ) -> PlanningSession:
        return self._store(transitions.fix_start(self.get_session(session_id), coordinate, source))

    def set_end(self, session_id: str, coordinate: Coordinate) -> PlanningSession:
        return self._store(transitions.set_end(self.get_session(session_id), coordinate))

    def select_point(self, session_id: str, coordinate: Coordinate) -> PlanningSession:
        return self._store(transitions.select_point(self.get_session(session_id), coordinate))

    def clear_end(self, session_id: str) -> PlanningSession:
        return self._store(transitions.clear_end(self.get_session(session_id)))

    def enable_manual_mode(self, session_id: str, reason: str = "") -> PlanningSession:
        return self._store(transitions.enable_manual_mode(self.get_session(session_id), reason))

    def reset(self, session_id: str) -> PlanningSession:
        session = self._store(transitions.reset(self.get_session(session_id)))
        logger.info("Session %s reset (generation %d)", session_id, session.generation)
        return session

    async def locate_start(self, session_id: str, provider: GeolocationProvider) -> PlanningSession:
        """
        Use a location fix as the start point, or fall back to manual mode.
        """
        generation = self.get_session(session_id).generation
        fix = await request_location_fix(provider)

        session = self.get_session(session_id)
        if session.generation != generation:
            logger.info("Session %s: discarding location fix after reset", session_id)
            return session

        if fix.ok:
            return self._store(transitions.fix_start(session, fix.coordinate, StartSource.LOCATION))

        return self._store(transitions.enable_manual_mode(session, user_message(fix.error)))

    # ------------------------------------------------------------------
    # Route calculation
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        start: Coordinate,
        end: Coordinate,
        avoidance: MultiPolygon | None,
    ) -> RoutingAttemptOutcome:
        try:
            result = await self.route_requester(start, end, avoidance)
        except RoutingError as e:
            return RouteFailure(kind=e.kind, detail=e.detail)
        except Exception as e:
            # Never leave the session stuck in COMPUTING
            logger.exception("Unexpected routing failure: %s", e)
            return RouteFailure(kind=ErrorKind.UNKNOWN, detail=str(e))
        return RouteSuccess(result=result, attempted_with_avoidance=avoidance is not None)

    def _classify(
        self,
        outcome: RouteSuccess,
        avoidance: MultiPolygon | None,
    ) -> tuple[RouteSuccess, RouteClassification]:
        touches = intersects_hazard(outcome.result, avoidance)
        result = replace(outcome.result, intersects_hazard=touches)
        outcome = replace(outcome, result=result)

        if outcome.attempted_with_avoidance or avoidance is None:
            classification = RouteClassification.SAFE_TOUCHING if touches else RouteClassification.SAFE
        else:
            classification = RouteClassification.UNSAFE if touches else RouteClassification.UNCONSTRAINED_SAFE
        return outcome, classification

    async def calculate_route(self, session_id: str) -> PlanningSession | None:
        """
        Compute and classify a route for the session.

        Tries a route avoiding high-risk polygons first; if ORS cannot
        produce one, retries once without avoidance. A second trigger while
        computing returns the session unchanged.

        Raises:
            KeyError: unknown session
            SessionStateError: start or end missing
        """
        session = self.get_session(session_id)
        if session.is_computing:
            logger.info("Session %s: calculation already in progress", session_id)
            return session

        session = self._store(transitions.start_computing(session))
        generation = session.generation
        start, end = session.start, session.end

        # One snapshot for the request and the classification
        avoidance = self.avoidance_geometry()

        outcome = await self._attempt(start, end, avoidance)
        if isinstance(outcome, RouteFailure) and avoidance is not None:
            logger.warning(
                "Session %s: avoiding route failed (%s), retrying without avoidance",
                session_id, outcome.kind.value,
            )
            outcome = await self._attempt(start, end, None)

        current = self.sessions.get(session_id)
        if current is None or current.generation != generation or not current.is_computing:
            logger.info("Session %s: discarding stale route result", session_id)
            return current

        if isinstance(outcome, RouteFailure):
            logger.error("Session %s: route calculation failed (%s)", session_id, outcome.kind.value)
            return self._store(transitions.fail(current, outcome))

        outcome, classification = self._classify(outcome, avoidance)
        logger.info(
            "Session %s: route resolved as %s (%.2f km)",
            session_id, classification.value, outcome.result.distance_m / 1000,
        )
        return self._store(transitions.resolve(current, outcome, classification))

    def directions_url(self, session_id: str) -> str:
        """
        Google Maps link for the session's route, or its points when no route exists.

        Raises:
            SessionStateError: start or end missing
        """
        session = self.get_session(session_id)
        if session.start is None or session.end is None:
            raise transitions.SessionStateError("Start and end are required for directions")
        geometry = session.result.geometry if session.result else None
        return build_directions_url(session.start, session.end, geometry)

    # ------------------------------------------------------------------
    # Live position
    # ------------------------------------------------------------------

    def update_position(
        self,
        session_id: str,
        coordinate: Coordinate,
        now_ms: float | None = None,
    ) -> WarnDecision:
        """
        Record a live position and check it against high-risk areas.

        While no route is current and the start came from location, the
        start point follows the device.
        """
        session = replace(self.get_session(session_id), last_position=coordinate)

        follows = session.start_source == StartSource.LOCATION and session.state in (
            SessionState.AWAITING_END,
            SessionState.READY,
        )
        if follows and session.start != coordinate:
            session = transitions.fix_start(session, coordinate, StartSource.LOCATION)

        now = time.time() * 1000 if now_ms is None else now_ms
        decision = check_proximity(
            coordinate,
            self.avoidance_geometry(),
            session.last_warn_ms,
            cooldown_ms=self.cooldown_ms,
            warn_distance_m=self.warn_distance_m,
            now_ms=now,
        )
        if isinstance(decision, Warn):
            session = replace(session, last_warn_ms=decision.timestamp_ms)

        self._store(session)
        return decision

    async def track(self, session_id: str, provider: GeolocationProvider) -> list[WarnDecision]:
        """Feed a provider's position stream into update_position until it ends."""
        decisions: list[WarnDecision] = []
        try:
            async for position in provider.watch_positions():
                if session_id not in self.sessions:
                    break
                decisions.append(self.update_position(session_id, position))
        except LocationError as e:
            # Route calculation keeps working without tracking
            logger.warning("Session %s: position tracking stopped: %s", session_id, e)
        warned = sum(1 for d in decisions if not isinstance(d, NoWarning))
        logger.info("Session %s: tracking ended after %d positions, %d warnings",
                    session_id, len(decisions), warned)
        return decisions


