"""Tests for flight plans, timeline sampling and the window classifier."""

import math

import pytest
from conftest import utc_millis

from sunside.errors import ChronologyError
from sunside.flight import (
    create_flight_plan,
    estimate_duration_minutes,
    sample_at,
    sample_evenly,
    side_of_aircraft,
)
from sunside.geo import project
from sunside.timeconv import from_instant


def _plan(make_airport, start, end, depart_millis, arrive_millis):
    return create_flight_plan(
        make_airport(1, *start),
        make_airport(2, *end),
        from_instant(depart_millis, "Etc/UTC"),
        from_instant(arrive_millis, "Etc/UTC"),
    )


@pytest.mark.parametrize(
    ("heading", "sun_bearing", "expected"),
    [
        (90, 105, "ahead"),
        (90, 75, "ahead"),
        (90, 106, "right"),
        (90, 255, "behind"),
        (90, 270, "behind"),
        (90, 0, "left"),
        (350, 10, "right"),
        (10, 350, "left"),
        (0, 180, "behind"),
    ],
)
def test_side_of_aircraft(heading: float, sun_bearing: float, expected: str) -> None:
    assert side_of_aircraft(heading, sun_bearing) == expected


def test_plan_rejects_arrival_before_departure(make_airport) -> None:
    start = utc_millis(2024, 1, 1, 12)
    with pytest.raises(ChronologyError):
        _plan(make_airport, (0, 0), (10, 10), start, start)
    with pytest.raises(ChronologyError):
        _plan(make_airport, (0, 0), (10, 10), start, start - 60_000)


def test_plan_carries_duration_and_path(make_airport) -> None:
    start = utc_millis(2024, 1, 1, 12)
    plan = _plan(make_airport, (0, 0), (0, 90), start, start + 330 * 60_000)
    assert plan.duration_minutes == 330
    assert plan.departure_utc == start
    assert plan.arrival_utc - plan.departure_utc == 330 * 60_000
    assert plan.path.central_angle == pytest.approx(math.pi / 2)
    assert plan.departure_airport.id == 1
    assert plan.arrival_airport.id == 2


def test_sample_endpoints_and_midpoint_time(make_airport) -> None:
    start = utc_millis(2024, 1, 1, 12)
    plan = _plan(make_airport, (0, 0), (0, 90), start, start + 3_600_000)
    first = sample_at(plan, 0)
    middle = sample_at(plan, 0.5)
    last = sample_at(plan, 1)
    assert first.location.lon == pytest.approx(0, abs=1e-9)
    assert last.location.lon == pytest.approx(90)
    assert middle.utc_millis == start + 1_800_000
    assert middle.heading_deg == pytest.approx(90)
    assert sample_at(plan, -1).t == 0
    assert sample_at(plan, 2).t == 1


def test_northbound_at_noon_in_december_has_sun_behind(make_airport) -> None:
    """Sun is low in the south over the equator at the December solstice."""
    plan = _plan(
        make_airport, (-10, 0), (10, 0),
        utc_millis(2024, 12, 21, 11), utc_millis(2024, 12, 21, 13),
    )
    sample = sample_at(plan, 0.5)
    assert min(sample.heading_deg, 360 - sample.heading_deg) < 1e-6
    assert sample.sun.status == "day"
    assert sample.sun.side == "behind"


def test_eastbound_and_westbound_see_sun_on_opposite_sides(make_airport) -> None:
    depart = utc_millis(2024, 12, 21, 11)
    arrive = utc_millis(2024, 12, 21, 13)
    east = sample_at(_plan(make_airport, (0, -10), (0, 10), depart, arrive), 0.5)
    west = sample_at(_plan(make_airport, (0, 10), (0, -10), depart, arrive), 0.5)
    assert east.sun.side == "right"
    assert west.sun.side == "left"


def test_midnight_sample_is_night(make_airport) -> None:
    plan = _plan(
        make_airport, (0, -10), (0, 10),
        utc_millis(2024, 12, 20, 23), utc_millis(2024, 12, 21, 1),
    )
    sample = sample_at(plan, 0.5)
    assert sample.sun.status == "night"
    assert sample.sun.altitude < 0


def test_sample_projection(make_airport) -> None:
    start = utc_millis(2024, 1, 1, 12)
    plan = _plan(make_airport, (40, -70), (50, 0), start, start + 3_600_000)
    sample = sample_at(plan, 0.25, projection=(360, 180))
    assert sample.projected == project(sample.location, 360, 180)
    assert sample_at(plan, 0.25).projected is None


def test_sample_evenly(make_airport) -> None:
    start = utc_millis(2024, 1, 1, 12)
    plan = _plan(make_airport, (0, 0), (0, 90), start, start + 3_600_000)
    samples = sample_evenly(plan, 5)
    assert [s.t for s in samples] == [0, 0.25, 0.5, 0.75, 1]
    assert len(sample_evenly(plan, 1)) == 2


@pytest.mark.parametrize(
    ("distance", "expected"),
    [
        (3_983_000, 270),
        (0, 30),
        (float("nan"), 30),
        (-5, 30),
        (100_000, 30),
        (450_000, 30),
        (451_000, 60),
    ],
)
def test_estimate_duration(distance: float, expected: int) -> None:
    assert estimate_duration_minutes(distance) == expected


def test_estimate_duration_options() -> None:
    assert estimate_duration_minutes(900_000, cruise_speed_kmh=450, round_to_minutes=15) == 120
    assert estimate_duration_minutes(100_000, min_minutes=90) == 90
    assert estimate_duration_minutes(3_983_000, cruise_speed_kmh=-1, round_to_minutes=0) == 270


def test_equatorial_eastbound_example(make_airport) -> None:
    """Three hours from 0,0 to 0,90 on 2024-06-01."""
    plan = _plan(
        make_airport, (0, 0), (0, 90),
        utc_millis(2024, 6, 1, 12), utc_millis(2024, 6, 1, 15),
    )
    assert plan.duration_minutes == 180
    samples = sample_evenly(plan, 5)
    lons = [s.location.lon for s in samples]
    assert lons[0] == pytest.approx(0, abs=1e-9)
    assert lons[-1] == pytest.approx(90)
    assert lons == sorted(lons)
    assert all(s.sun.side in {"left", "right", "ahead", "behind"} for s in samples)
