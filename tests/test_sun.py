"""Tests for solar position, the subsolar point and altitude contours."""

import math
from datetime import datetime, timezone

import numpy as np
import pytest
from conftest import utc_millis

from sunside.geo import EARTH_RADIUS_METERS, distance_meters
from sunside.models import GeoPoint, SubsolarPoint
from sunside.sun import (
    RAD,
    altitude_contour_latitude,
    approximate_terminator,
    bearing_from_north,
    classify_daylight,
    sample_terminator_circle,
    subsolar_point,
    sun_position,
    terminator_latitude,
    to_epoch_millis,
)


def test_subsolar_latitude_at_june_solstice() -> None:
    sub = subsolar_point(utc_millis(2024, 6, 20, 20, 51))
    assert sub.lat == pytest.approx(23.44, abs=0.1)


def test_subsolar_latitude_at_december_solstice() -> None:
    sub = subsolar_point(utc_millis(2024, 12, 21, 9, 20))
    assert sub.lat == pytest.approx(-23.44, abs=0.1)


def test_subsolar_longitude_near_greenwich_at_noon() -> None:
    """Within the equation of time of the prime meridian at 12:00 UTC."""
    sub = subsolar_point(utc_millis(2024, 3, 20, 12, 0))
    assert -5 < sub.lon < 5
    assert -180 <= sub.lon < 180


def test_sun_is_overhead_at_subsolar_point() -> None:
    instant = utc_millis(2024, 8, 2, 7, 45)
    sub = subsolar_point(instant)
    altitude = sun_position(instant, sub.lat, sub.lon).altitude
    assert altitude == pytest.approx(math.pi / 2, abs=1e-6)


def test_sun_below_horizon_at_antipode_of_subsolar_point() -> None:
    instant = utc_millis(2024, 8, 2, 7, 45)
    sub = subsolar_point(instant)
    altitude = sun_position(instant, -sub.lat, sub.lon + 180).altitude
    assert altitude == pytest.approx(-math.pi / 2, abs=1e-6)


def test_datetime_and_millis_agree() -> None:
    dt = datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc)
    assert to_epoch_millis(dt) == utc_millis(2024, 1, 15, 18, 0)
    assert to_epoch_millis(dt.replace(tzinfo=None)) == utc_millis(2024, 1, 15, 18, 0)
    assert sun_position(dt, 40, -74) == sun_position(to_epoch_millis(dt), 40, -74)


def test_bearing_from_south_based_azimuth() -> None:
    assert bearing_from_north(0) == pytest.approx(180)
    assert bearing_from_north(math.pi / 2) == pytest.approx(270)
    assert bearing_from_north(-math.pi / 2) == pytest.approx(90)
    assert bearing_from_north(math.pi) == pytest.approx(0)


def test_afternoon_sun_is_in_the_west() -> None:
    """New York, mid-afternoon local time in January."""
    pos = sun_position(utc_millis(2024, 1, 15, 20, 0), 40.7, -74.0)
    assert pos.altitude > 0
    assert 180 < bearing_from_north(pos.azimuth) < 270


def test_daylight_thresholds() -> None:
    assert classify_daylight(math.radians(30)) == "day"
    assert classify_daylight(0.0) == "day"
    assert classify_daylight(-1e-9) == "twilight"
    assert classify_daylight(-6 * RAD) == "twilight"
    assert classify_daylight(math.radians(-6)) == "twilight"
    assert classify_daylight(-6.0001 * RAD) == "night"
    assert classify_daylight(-math.pi / 2) == "night"


def test_terminator_latitude_has_zero_sun_altitude() -> None:
    instant = utc_millis(2024, 6, 1, 15, 0)
    sub = subsolar_point(instant)
    for lon in range(-180, 181, 20):
        lat = terminator_latitude(sub, lon)
        assert -90 <= lat <= 90
        altitude = sun_position(instant, lat, lon).altitude
        assert altitude == pytest.approx(0, abs=1e-9)


def test_terminator_latitude_accepts_arrays() -> None:
    sub = SubsolarPoint(lat=15.0, lon=30.0)
    lons = np.linspace(-180, 180, 7)
    lats = terminator_latitude(sub, lons)
    assert isinstance(lats, np.ndarray)
    assert lats.shape == (7,)
    for lon, lat in zip(lons, lats):
        assert lat == pytest.approx(terminator_latitude(sub, float(lon)))
    assert isinstance(terminator_latitude(sub, 10.0), float)


def test_terminator_latitude_under_and_opposite_the_sun() -> None:
    """With the sun at 20N the terminator reaches 70S below it and 70N opposite it."""
    sub = SubsolarPoint(lat=20.0, lon=0.0)
    assert terminator_latitude(sub, 0.0) == pytest.approx(-70.0)
    assert terminator_latitude(sub, 180.0) == pytest.approx(70.0)


def test_civil_contour_on_night_side() -> None:
    sub = SubsolarPoint(lat=20.0, lon=0.0)
    term = terminator_latitude(sub, 0.0)
    lat = altitude_contour_latitude(sub, 0.0, -6.0, term)
    assert lat == pytest.approx(-76.0)


def test_civil_contour_missing_inside_polar_cap() -> None:
    sub = SubsolarPoint(lat=2.0, lon=0.0)
    term = terminator_latitude(sub, 90.0)
    assert altitude_contour_latitude(sub, 90.0, -6.0, term) is None


def test_terminator_circle_is_a_quarter_circumference_from_the_sun() -> None:
    sub = SubsolarPoint(lat=-12.5, lon=100.0)
    points = sample_terminator_circle(sub, samples=73)
    assert len(points) == 73
    quarter = EARTH_RADIUS_METERS * math.pi / 2
    centre = GeoPoint(lat=sub.lat, lon=sub.lon)
    for point in points:
        assert distance_meters(centre, point) == pytest.approx(quarter, rel=1e-9)
        assert -180 <= point.lon < 180


def test_terminator_circle_has_at_least_three_points() -> None:
    assert len(sample_terminator_circle(SubsolarPoint(0.0, 0.0), samples=1)) == 3


def test_bisection_terminator_matches_closed_form() -> None:
    instant = utc_millis(2024, 5, 10, 3, 0)
    sub = subsolar_point(instant)
    coarse = approximate_terminator(instant, samples=36)
    assert len(coarse) == 36
    assert coarse[0].lon == -180
    for point in coarse:
        exact = terminator_latitude(sub, point.lon)
        if abs(exact) < 85:
            assert point.lat == pytest.approx(exact, abs=1e-3)
