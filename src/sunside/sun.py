"""Solar position: sun altitude/azimuth, subsolar point and solar-altitude contours.

Uses the low-precision ephemeris popularised by SunCalc (mean anomaly ->
ecliptic longitude -> declination/right ascension -> horizontal coordinates).
Accuracy is well under a degree, which is plenty for day/night shading.

Azimuth convention: 0 = south, positive westward. Use ``bearing_from_north``
to turn it into a compass bearing.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from sunside.geo import normalize_lon
from sunside.models import DaylightStatus, GeoPoint, SubsolarPoint, SunPosition

RAD = math.pi / 180
OBLIQUITY = RAD * 23.4397  # Obliquity of the Earth's axis
PERIHELION = RAD * 102.9372  # Ecliptic longitude of perihelion
CIVIL_TWILIGHT_DEG = -6.0
_THRESHOLD_EPS = 1e-12  # Radians

_DAY_MS = 1000 * 60 * 60 * 24
_J1970 = 2440588
_J2000 = 2451545

Vec3 = tuple[float, float, float]


def to_epoch_millis(instant: datetime | float) -> float:
    """Epoch milliseconds for a datetime or a number of milliseconds.

    Naive datetimes are treated as UTC.
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.timestamp() * 1000
    return float(instant)


def _days_since_j2000(epoch_millis: float) -> float:
    return epoch_millis / _DAY_MS - 0.5 + _J1970 - _J2000


def _sidereal_time(d: float, lw: float) -> float:
    return RAD * (280.16 + 360.9856235 * d) - lw


def _sun_coords(d: float) -> tuple[float, float]:
    """Return (declination, right ascension) in radians."""
    m = RAD * (357.5291 + 0.98560028 * d)
    center = RAD * (1.9148 * math.sin(m) + 0.02 * math.sin(2 * m) + 0.0003 * math.sin(3 * m))
    ecliptic_lon = m + center + PERIHELION + math.pi
    dec = math.asin(math.sin(OBLIQUITY) * math.sin(ecliptic_lon))
    ra = math.atan2(math.sin(ecliptic_lon) * math.cos(OBLIQUITY), math.cos(ecliptic_lon))
    return dec, ra


def sun_position(instant: datetime | float, lat: float, lon: float) -> SunPosition:
    """Sun altitude and azimuth (radians) for an observer at ``lat``/``lon``."""
    d = _days_since_j2000(to_epoch_millis(instant))
    lw = RAD * -lon
    phi = RAD * lat
    dec, ra = _sun_coords(d)
    h = _sidereal_time(d, lw) - ra

    azimuth = math.atan2(
        math.sin(h), math.cos(h) * math.sin(phi) - math.tan(dec) * math.cos(phi)
    )
    altitude = math.asin(
        math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec) * math.cos(h)
    )
    return SunPosition(altitude=altitude, azimuth=azimuth)


def bearing_from_north(azimuth_rad: float) -> float:
    """Convert a south-based azimuth to a compass bearing in [0, 360)."""
    return (math.degrees(azimuth_rad) + 180.0 + 360.0) % 360.0


def classify_daylight(altitude_rad: float) -> DaylightStatus:
    """Day with the sun on or above the horizon, civil twilight down to -6 degrees, night below.

    Compared in radians with a tolerance of a few ulps so that -6 degrees
    converted either way still counts as twilight.
    """
    if altitude_rad >= 0:
        return "day"
    if altitude_rad >= CIVIL_TWILIGHT_DEG * RAD - _THRESHOLD_EPS:
        return "twilight"
    return "night"


def subsolar_point(instant: datetime | float) -> SubsolarPoint:
    """Point where the sun is at zenith, longitude in [-180, 180)."""
    d = _days_since_j2000(to_epoch_millis(instant))
    dec, ra = _sun_coords(d)
    gmst = _sidereal_time(d, 0)
    # Hour angle is zero at the subsolar meridian.
    lon_deg = normalize_lon(math.degrees(ra - gmst))
    return SubsolarPoint(lat=math.degrees(dec), lon=lon_deg)


def terminator_latitude(subsolar: SubsolarPoint, lon_deg):
    """Latitude of the sun-altitude-zero contour at ``lon_deg``.

    Closed form ``tan(lat) = -cot(lat0) * cos(lon - lon0)``. Accepts a scalar
    or a numpy array of longitudes. Ill-conditioned when the subsolar latitude
    is near zero; see ``sample_altitude_contour`` for that case.
    """
    lat0 = subsolar.lat * RAD
    delta = np.asarray(lon_deg, dtype=float) * RAD - subsolar.lon * RAD

    phi = np.arctan2(-math.cos(lat0) * np.cos(delta), math.sin(lat0))
    # Fold into the latitude range.
    phi = np.where(phi > math.pi / 2, phi - math.pi, phi)
    phi = np.where(phi < -math.pi / 2, phi + math.pi, phi)
    result = phi / RAD
    return float(result) if result.ndim == 0 else result


def _wrap_to_pi(angle: float) -> float:
    return math.atan2(math.sin(angle), math.cos(angle))


def altitude_contour_latitude(
    subsolar: SubsolarPoint,
    lon_deg: float,
    altitude_deg: float,
    terminator_lat_deg: float,
) -> float | None:
    """Latitude where the sun sits at ``altitude_deg`` along meridian ``lon_deg``.

    Solves ``sin(lat0)·sin(lat) + cos(lat0)·cos(lat)·cos(lon - lon0) = sin(alt)``
    rewritten as ``R·cos(lat - delta) = sin(alt)``. Of the (up to two)
    solutions, the one closest to ``terminator_lat_deg`` on the night side is
    returned. Returns None when the meridian never reaches that altitude
    (inside a polar day or night cap); callers substitute +/-90.
    """
    sin_alt = math.sin(altitude_deg * RAD)
    lat0 = subsolar.lat * RAD
    delta_lon = (lon_deg - subsolar.lon) * RAD

    a = math.sin(lat0)
    b = math.cos(lat0) * math.cos(delta_lon)
    r = math.hypot(a, b)
    if not math.isfinite(r) or r == 0:
        return None

    v = sin_alt / r
    if not math.isfinite(v) or v < -1 or v > 1:
        return None

    delta = math.atan2(a, b)
    offset = math.acos(v)
    candidates = [
        phi
        for phi in (_wrap_to_pi(delta + offset), _wrap_to_pi(delta - offset))
        if -math.pi / 2 <= phi <= math.pi / 2
    ]
    if not candidates:
        return None

    term_phi = terminator_lat_deg * RAD
    want_north = subsolar.lat < 0
    best = candidates[0]
    best_score = math.inf
    for phi in candidates:
        d = phi - term_phi
        on_night_side = d >= 0 if want_north else d <= 0
        score = abs(d) + (0 if on_night_side else 10)
        if score < best_score:
            best = phi
            best_score = score
    return best / RAD


@dataclass(frozen=True)
class ContourBasis:
    """Orthonormal frame with ``n`` pointing at the subsolar point."""

    n: Vec3
    u: Vec3
    v: Vec3


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _normalize(v: Vec3) -> Vec3:
    mag = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2]) or 1.0
    return (v[0] / mag, v[1] / mag, v[2] / mag)


def build_contour_basis(subsolar: SubsolarPoint) -> ContourBasis:
    lat0 = subsolar.lat * RAD
    lon0 = subsolar.lon * RAD
    n = (math.cos(lat0) * math.cos(lon0), math.cos(lat0) * math.sin(lon0), math.sin(lat0))
    ref = (1.0, 0.0, 0.0) if abs(n[0]) < 0.9 else (0.0, 1.0, 0.0)
    u = _normalize(_cross(ref, n))
    v = _normalize(_cross(n, u))
    return ContourBasis(n=n, u=u, v=v)


def sample_altitude_contour(
    basis: ContourBasis, altitude_deg: float, samples: int
) -> list[GeoPoint]:
    """Sample the circle where the sun stands at ``altitude_deg``.

    The circle has angular radius ``90 - altitude_deg`` around the subsolar
    axis. Points come back in circle order, longitudes in [-180, 180).
    """
    count = max(3, int(samples))
    sin_alt = math.sin(altitude_deg * RAD)
    cos_alt = math.cos(altitude_deg * RAD)
    n, u, v = basis.n, basis.u, basis.v
    out: list[GeoPoint] = []
    for i in range(count):
        theta = i / count * math.pi * 2
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        x = n[0] * sin_alt + u[0] * cos_alt * cos_t + v[0] * cos_alt * sin_t
        y = n[1] * sin_alt + u[1] * cos_alt * cos_t + v[1] * cos_alt * sin_t
        z = n[2] * sin_alt + u[2] * cos_alt * cos_t + v[2] * cos_alt * sin_t
        out.append(
            GeoPoint(
                lat=math.degrees(math.atan2(z, math.hypot(x, y))),
                lon=normalize_lon(math.degrees(math.atan2(y, x))),
            )
        )
    return out


def sample_terminator_circle(subsolar: SubsolarPoint, samples: int = 361) -> list[GeoPoint]:
    """The sun-altitude-zero ring as lat/lon points in circle order."""
    basis = build_contour_basis(subsolar)
    return sample_altitude_contour(basis, 0.0, samples)


def _find_zero_altitude_lat(instant: float, lon: float) -> float:
    min_lat = -89.9
    max_lat = 89.9
    alt_min = sun_position(instant, min_lat, lon).altitude
    alt_max = sun_position(instant, max_lat, lon).altitude

    # No crossing along this meridian: polar day or night, pick the edge.
    if alt_min >= 0 and alt_max >= 0:
        return max_lat
    if alt_min <= 0 and alt_max <= 0:
        return min_lat

    low, high = min_lat, max_lat
    low_is_day = alt_min > 0
    for _ in range(25):
        mid = (low + high) / 2
        if (sun_position(instant, mid, lon).altitude > 0) == low_is_day:
            low = mid
        else:
            high = mid
    return (low + high) / 2


def approximate_terminator(instant: datetime | float, samples: int = 180) -> list[GeoPoint]:
    """Coarse terminator by bisecting sun altitude along evenly spaced meridians.

    Meridians without a crossing report +/-89.9. Prefer ``terminator_latitude``
    for drawing; this is the slow reference.
    """
    millis = to_epoch_millis(instant)
    step = 360 / samples
    result: list[GeoPoint] = []
    for i in range(samples):
        lon = -180 + i * step
        result.append(GeoPoint(lat=_find_zero_altitude_lat(millis, lon), lon=lon))
    return result
