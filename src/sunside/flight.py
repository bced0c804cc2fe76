"""Flight timeline: validated flight plans and per-fraction samples of aircraft and sun state."""

import logging
import math

from sunside.errors import ChronologyError
from sunside.geo import create_great_circle_path, heading_at, interpolate, project
from sunside.models import (
    Airport,
    FlightPlan,
    FlightSample,
    SideOfAircraft,
    SunState,
    ZonedInstant,
)
from sunside.sun import bearing_from_north, classify_daylight, sun_position
from sunside.timeconv import duration_minutes

logger = logging.getLogger(__name__)

AHEAD_LIMIT_DEG = 15.0
BEHIND_LIMIT_DEG = 165.0

DEFAULT_CRUISE_SPEED_KMH = 900.0
DEFAULT_ROUND_TO_MINUTES = 30


def create_flight_plan(
    departure_airport: Airport,
    arrival_airport: Airport,
    departure_time: ZonedInstant,
    arrival_time: ZonedInstant,
) -> FlightPlan:
    """Build a flight plan from two airports and two resolved instants.

    Raises:
        ChronologyError: Arrival is not strictly after departure in UTC.
    """
    departure_utc = departure_time.epoch_millis
    arrival_utc = arrival_time.epoch_millis
    if arrival_utc <= departure_utc:
        raise ChronologyError("Arrival time must be after departure time in UTC.")

    path = create_great_circle_path(departure_airport.location, arrival_airport.location)
    minutes = duration_minutes(departure_utc, arrival_utc)
    logger.debug(
        "Flight plan %s -> %s: %d min, %.0f km",
        departure_airport.name,
        arrival_airport.name,
        minutes,
        path.distance_meters / 1000,
    )
    return FlightPlan(
        departure_airport=departure_airport,
        arrival_airport=arrival_airport,
        departure_time=departure_time,
        arrival_time=arrival_time,
        departure_utc=departure_utc,
        arrival_utc=arrival_utc,
        duration_minutes=minutes,
        path=path,
    )


def side_of_aircraft(heading_deg: float, sun_bearing_deg: float) -> SideOfAircraft:
    """Which window the sun is in, from the signed heading-to-sun angle."""
    rel = (sun_bearing_deg - heading_deg + 540.0) % 360.0 - 180.0  # -180..180
    if abs(rel) <= AHEAD_LIMIT_DEG:
        return "ahead"
    if abs(rel) >= BEHIND_LIMIT_DEG:
        return "behind"
    return "right" if rel > 0 else "left"


def sample_at(
    plan: FlightPlan,
    t: float,
    projection: tuple[float, float] | None = None,
) -> FlightSample:
    """Sample the flight at timeline fraction ``t``.

    Args:
        plan: Flight plan.
        t: Fraction of the flight from 0 (departure) to 1 (arrival). Clamped.
        projection: Optional ``(width, height)`` of a map canvas; when given
            the sample carries its equirectangular map position.

    Returns:
        FlightSample for that instant.
    """
    clamped = min(1.0, max(0.0, t))
    total_millis = plan.arrival_utc - plan.departure_utc
    utc_millis = plan.departure_utc + clamped * total_millis
    location = interpolate(plan.path, clamped)
    heading = heading_at(plan.path, clamped)

    sun = sun_position(utc_millis, location.lat, location.lon)
    sun_bearing = bearing_from_north(sun.azimuth)
    projected = None
    if projection is not None:
        width, height = projection
        projected = project(location, width, height)

    return FlightSample(
        t=clamped,
        utc_millis=utc_millis,
        location=location,
        heading_deg=heading,
        sun=SunState(
            altitude=sun.altitude,
            azimuth=sun.azimuth,
            bearing_deg=sun_bearing,
            status=classify_daylight(sun.altitude),
            side=side_of_aircraft(heading, sun_bearing),
        ),
        projected=projected,
    )


def sample_evenly(
    plan: FlightPlan,
    count: int = 60,
    projection: tuple[float, float] | None = None,
) -> list[FlightSample]:
    """``count`` samples spread evenly from departure to arrival (at least two)."""
    n = max(2, int(count))
    return [sample_at(plan, i / (n - 1), projection) for i in range(n)]


def estimate_duration_minutes(
    distance_meters: float,
    cruise_speed_kmh: float = DEFAULT_CRUISE_SPEED_KMH,
    round_to_minutes: int = DEFAULT_ROUND_TO_MINUTES,
    min_minutes: int | None = None,
) -> int:
    """Default flight length for a distance, for pre-filling an arrival time.

    Rounds distance / speed up to the next multiple of ``round_to_minutes``,
    never below ``min_minutes`` (which defaults to ``round_to_minutes``).
    Non-positive options fall back to their defaults.
    """
    if not cruise_speed_kmh or cruise_speed_kmh <= 0:
        cruise_speed_kmh = DEFAULT_CRUISE_SPEED_KMH
    if not round_to_minutes or round_to_minutes <= 0:
        round_to_minutes = DEFAULT_ROUND_TO_MINUTES
    if not min_minutes or min_minutes <= 0:
        min_minutes = round_to_minutes

    if not math.isfinite(distance_meters) or distance_meters <= 0:
        return min_minutes

    raw_minutes = distance_meters / 1000 / cruise_speed_kmh * 60
    rounded = math.ceil(raw_minutes / round_to_minutes) * round_to_minutes
    return max(min_minutes, int(rounded))
