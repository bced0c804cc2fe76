"""Data model definitions. Plain immutable records passed between the geometry, sun, flight and overlay layers."""

from dataclasses import dataclass
from typing import Literal

DaylightStatus = Literal["day", "twilight", "night"]
SideOfAircraft = Literal["left", "right", "ahead", "behind"]
SunSummaryBucketName = Literal["left", "right", "ahead", "behind", "night"]


@dataclass(frozen=True)
class GeoPoint:
    """A position on the sphere."""

    lat: float  # Latitude (decimal degrees)
    lon: float  # Longitude (decimal degrees)


@dataclass(frozen=True)
class ProjectedPoint:
    """A point on the equirectangular map canvas."""

    x: float  # Pixels from the left edge
    y: float  # Pixels from the top edge


@dataclass(frozen=True)
class GreatCirclePath:
    """Great-circle route between two points. Distance is computed once."""

    from_point: GeoPoint
    to_point: GeoPoint
    distance_meters: float
    central_angle: float  # Radians


@dataclass(frozen=True)
class LocalDateTime:
    """Wall-clock input in some zone. Not yet resolved to an instant."""

    year: int
    month: int
    day: int
    hour: int
    minute: int


@dataclass(frozen=True)
class ZonedInstant:
    """An absolute instant together with the zone it was expressed in.

    ``epoch_millis`` is the source of truth; ``iso`` and ``offset_minutes``
    are derived from it for display.
    """

    epoch_millis: int  # UTC epoch milliseconds
    zone: str  # IANA zone name
    offset_minutes: int  # Offset from UTC at that instant
    iso: str  # ISO-8601 text with explicit offset


@dataclass(frozen=True)
class LocalZoneInfo:
    """Zone name and UTC offset at a location and instant."""

    time_zone: str
    offset_minutes: int


@dataclass(frozen=True)
class Airport:
    """Airport record as resolved by the caller."""

    id: int | str
    name: str
    city: str | None
    country: str | None
    location: GeoPoint
    time_zone: str  # IANA zone name
    iata: str | None = None
    icao: str | None = None
    ident: str | None = None


@dataclass(frozen=True)
class FlightPlan:
    """Validated flight definition. arrival_utc is always after departure_utc."""

    departure_airport: Airport
    arrival_airport: Airport
    departure_time: ZonedInstant
    arrival_time: ZonedInstant
    departure_utc: int  # Epoch millis
    arrival_utc: int  # Epoch millis
    duration_minutes: int
    path: GreatCirclePath


@dataclass(frozen=True)
class SunPosition:
    """Sun horizontal coordinates. Azimuth is 0 = south, positive westward."""

    altitude: float  # Radians
    azimuth: float  # Radians


@dataclass(frozen=True)
class SunState:
    """Sun as seen from the aircraft at one sample."""

    altitude: float  # Radians
    azimuth: float  # Radians, 0 = south
    bearing_deg: float  # Compass bearing, 0 = north, clockwise
    status: DaylightStatus
    side: SideOfAircraft


@dataclass(frozen=True)
class FlightSample:
    """Aircraft and sun state at one point of the flight timeline."""

    t: float  # Timeline fraction in [0, 1]
    utc_millis: float
    location: GeoPoint
    heading_deg: float
    sun: SunState
    projected: ProjectedPoint | None = None


@dataclass(frozen=True)
class SubsolarPoint:
    """Point where the sun is at zenith."""

    lat: float
    lon: float  # In [-180, 180)


@dataclass(frozen=True)
class DayNightOverlay:
    """Path strings for one instant and one canvas size."""

    subsolar: SubsolarPoint
    sun: ProjectedPoint  # Projected subsolar point
    terminator_path: str
    day_path: str
    night_path: str
    twilight_path: str


@dataclass(frozen=True)
class SunSummaryBucket:
    """Time spent in one summary category."""

    millis: int
    fraction: float  # In [0, 1]
    percent: int  # Sums to 100 within a grouping
    minutes: int  # Sums to the plan duration within a grouping


@dataclass(frozen=True)
class FlightSunSummary:
    """Integrated sun exposure for a whole flight."""

    total_millis: int
    total_minutes: int
    buckets: dict[SunSummaryBucketName, SunSummaryBucket]
    daylight: dict[DaylightStatus, SunSummaryBucket]
