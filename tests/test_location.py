"""Tests for geolocation providers and bounded location fixes."""

import asyncio
import json

import pytest

from saferoute.errors import ErrorKind
from saferoute.location import (
    GeolocationProvider,
    LocationError,
    ReplayLocationProvider,
    StaticLocationProvider,
    request_location_fix,
)
from saferoute.routing import Coordinate


class HangingProvider(GeolocationProvider):
    """Provider whose fix never arrives."""

    def __init__(self):
        super().__init__("HangingProvider")

    async def get_current_position(self, timeout_s: float) -> Coordinate:
        await asyncio.Event().wait()

    async def watch_positions(self):
        if False:
            yield


class TestLocationFix:
    @pytest.mark.asyncio
    async def test_fix_success(self):
        fix = await request_location_fix(StaticLocationProvider(Coordinate(lat=31.9, lon=35.2)))

        assert fix.ok
        assert fix.coordinate == Coordinate(lat=31.9, lon=35.2)
        assert fix.error is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", [
        ErrorKind.LOCATION_DENIED,
        ErrorKind.LOCATION_UNAVAILABLE,
        ErrorKind.LOCATION_TIMEOUT,
    ])
    async def test_fix_errors(self, kind):
        fix = await request_location_fix(StaticLocationProvider(error=kind))

        assert not fix.ok
        assert fix.error == kind

    @pytest.mark.asyncio
    async def test_guard_timer_catches_hung_provider(self):
        fix = await request_location_fix(HangingProvider(), timeout_s=10, guard_s=0.05)

        assert fix.error == ErrorKind.LOCATION_TIMEOUT
        assert fix.detail == "guard timeout"

    def test_location_error_rejects_route_kinds(self):
        with pytest.raises(ValueError):
            LocationError(ErrorKind.ROUTE_NOT_FOUND)

    def test_static_provider_defaults_to_unavailable(self):
        assert StaticLocationProvider().error == ErrorKind.LOCATION_UNAVAILABLE


class TestReplayProvider:
    @pytest.mark.asyncio
    async def test_from_file(self, tmp_path):
        path = tmp_path / "track.json"
        path.write_text(json.dumps([{"lat": 31.9, "lon": 35.2}, {"lat": 31.91, "lon": 35.21}]))

        provider = ReplayLocationProvider.from_file(path, interval_s=0)

        assert await provider.get_current_position(1) == Coordinate(lat=31.9, lon=35.2)
        positions = [p async for p in provider.watch_positions()]
        assert len(positions) == 2

    @pytest.mark.asyncio
    async def test_empty_track_is_unavailable(self):
        with pytest.raises(LocationError) as exc:
            await ReplayLocationProvider([]).get_current_position(1)
        assert exc.value.kind == ErrorKind.LOCATION_UNAVAILABLE
