"""Shared fixtures for the sunside test suite."""

from datetime import datetime, timezone

import pytest

from sunside.models import Airport, GeoPoint


def utc_millis(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """Epoch milliseconds for a UTC wall-clock time."""
    dt = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    return int(dt.timestamp()) * 1000


@pytest.fixture
def make_airport():
    """Factory for minimal airports on Etc/UTC."""

    def _make(airport_id: int, lat: float, lon: float, time_zone: str = "Etc/UTC") -> Airport:
        return Airport(
            id=airport_id,
            name=f"Airport {airport_id}",
            city="Test",
            country="TT",
            location=GeoPoint(lat=lat, lon=lon),
            time_zone=time_zone,
        )

    return _make
