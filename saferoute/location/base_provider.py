"""Geolocation providers and bounded location fixes."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass

from saferoute.config import FIRST_FIX_TIMEOUT_S, PENDING_GUARD_S
from saferoute.errors import ErrorKind, SafeRouteError
from saferoute.routing.geometry import Coordinate

logger = logging.getLogger(__name__)

LOCATION_ERROR_KINDS = {
    ErrorKind.LOCATION_DENIED,
    ErrorKind.LOCATION_UNAVAILABLE,
    ErrorKind.LOCATION_TIMEOUT,
}


class LocationError(SafeRouteError):
    """A position could not be obtained."""

    def __init__(self, kind: ErrorKind, detail: str = ""):
        if kind not in LOCATION_ERROR_KINDS:
            raise ValueError(f"Not a location error kind: {kind}")
        super().__init__(kind, detail)


class GeolocationProvider(ABC):
    """Abstract source of device positions."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get_current_position(self, timeout_s: float) -> Coordinate:
        """
        Obtain a one-shot position fix.

        Args:
            timeout_s: How long the provider may search before giving up

        Returns:
            The current position

        Raises:
            LocationError: permission denied, position unavailable or timeout
        """
        pass

    @abstractmethod
    def watch_positions(self) -> AsyncIterator[Coordinate]:
        """
        Stream position updates until the provider stops or fails.

        Raises:
            LocationError: when tracking fails mid-stream
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


@dataclass(frozen=True)
class LocationFix:
    """Outcome of a location request: a coordinate or an error kind, never both."""
    coordinate: Coordinate | None = None
    error: ErrorKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.coordinate is not None


async def request_location_fix(
    provider: GeolocationProvider,
    timeout_s: float = FIRST_FIX_TIMEOUT_S,
    guard_s: float = PENDING_GUARD_S,
) -> LocationFix:
    """
    Ask a provider for a position with two bounds.

    The provider receives timeout_s as its own limit; an independent guard
    of guard_s catches providers that never answer. Either bound expiring
    yields LOCATION_TIMEOUT.
    """
    try:
        coordinate = await asyncio.wait_for(
            provider.get_current_position(timeout_s),
            timeout=guard_s,
        )
    except asyncio.TimeoutError:
        logger.warning("%s gave no position within %.0fs guard", provider.name, guard_s)
        return LocationFix(error=ErrorKind.LOCATION_TIMEOUT, detail="guard timeout")
    except LocationError as e:
        logger.warning("%s location failed: %s", provider.name, e)
        return LocationFix(error=e.kind, detail=e.detail)

    logger.info("%s fix at (%.5f, %.5f)", provider.name, coordinate.lat, coordinate.lon)
    return LocationFix(coordinate=coordinate)
