"""Concrete geolocation providers for fixed positions and recorded tracks."""

import asyncio
import json
from pathlib import Path

from saferoute.errors import ErrorKind
from saferoute.routing.geometry import Coordinate
from .base_provider import GeolocationProvider, LocationError


class StaticLocationProvider(GeolocationProvider):
    """
    Provider that always reports the same position, or always fails.

    Useful when the client already resolved its location, or for running
    the planner with location services switched off.
    """

    def __init__(
        self,
        coordinate: Coordinate | None = None,
        error: ErrorKind | None = None,
        name: str = "StaticLocationProvider",
    ):
        super().__init__(name)
        if coordinate is None and error is None:
            error = ErrorKind.LOCATION_UNAVAILABLE
        self.coordinate = coordinate
        self.error = error

    async def get_current_position(self, timeout_s: float) -> Coordinate:
        if self.error is not None:
            raise LocationError(self.error, f"{self.name} configured to fail")
        return self.coordinate

    async def watch_positions(self):
        yield await self.get_current_position(0)


class ReplayLocationProvider(GeolocationProvider):
    """Provider that replays a recorded track at a fixed interval."""

    def __init__(
        self,
        positions: list[Coordinate],
        interval_s: float = 1.0,
        name: str = "ReplayLocationProvider",
    ):
        """
        Initialize the replay provider.

        Args:
            positions: Track to replay, first entry doubles as the one-shot fix
            interval_s: Delay between streamed positions
            name: Provider name
        """
        super().__init__(name)
        self.positions = list(positions)
        self.interval_s = interval_s

    @classmethod
    def from_file(cls, path: str | Path, interval_s: float = 1.0) -> "ReplayLocationProvider":
        """Load a track stored as a JSON list of {"lat": .., "lon": ..} objects."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls([Coordinate.from_dict(p) for p in data], interval_s=interval_s)

    async def get_current_position(self, timeout_s: float) -> Coordinate:
        if not self.positions:
            raise LocationError(ErrorKind.LOCATION_UNAVAILABLE, "empty track")
        return self.positions[0]

    async def watch_positions(self):
        for i, position in enumerate(self.positions):
            if i:
                await asyncio.sleep(self.interval_s)
            yield position
