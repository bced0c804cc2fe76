"""Spherical geometry: great-circle distance, bearing, slerp and the equirectangular map projection."""

import math

from sunside.models import GeoPoint, GreatCirclePath, ProjectedPoint

EARTH_RADIUS_METERS = 6_371_000.0  # Mean Earth radius
HEADING_STEP = 1e-4  # Timeline step for the finite-difference heading


def normalize_lon(lon_deg: float) -> float:
    """Wrap a longitude to [-180, 180)."""
    return (lon_deg + 540.0) % 360.0 - 180.0


def _haversine(from_point: GeoPoint, to_point: GeoPoint) -> tuple[float, float]:
    """Return (distance in meters, central angle in radians)."""
    lat1 = math.radians(from_point.lat)
    lat2 = math.radians(to_point.lat)
    d_lat = lat2 - lat1
    d_lon = math.radians(to_point.lon - from_point.lon)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    central_angle = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * central_angle, central_angle


def _to_cartesian(point: GeoPoint) -> tuple[float, float, float]:
    lat = math.radians(point.lat)
    lon = math.radians(point.lon)
    return (
        math.cos(lat) * math.cos(lon),
        math.cos(lat) * math.sin(lon),
        math.sin(lat),
    )


def _from_cartesian(x: float, y: float, z: float) -> GeoPoint:
    lon = math.atan2(y, x)
    lat = math.atan2(z, math.hypot(x, y))
    return GeoPoint(lat=math.degrees(lat), lon=math.degrees(lon))


def distance_meters(from_point: GeoPoint, to_point: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""
    return _haversine(from_point, to_point)[0]


def bearing_degrees(from_point: GeoPoint, to_point: GeoPoint) -> float:
    """Initial compass bearing from ``from_point`` to ``to_point``.

    Measured clockwise from true north, in [0, 360).
    """
    lat1 = math.radians(from_point.lat)
    lat2 = math.radians(to_point.lat)
    d_lon = math.radians(to_point.lon - from_point.lon)

    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        d_lon
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def create_great_circle_path(from_point: GeoPoint, to_point: GeoPoint) -> GreatCirclePath:
    """Describe the great circle between two points, computing its length once."""
    distance, central_angle = _haversine(from_point, to_point)
    return GreatCirclePath(
        from_point=from_point,
        to_point=to_point,
        distance_meters=distance,
        central_angle=central_angle,
    )


def interpolate(path: GreatCirclePath, t: float) -> GeoPoint:
    """Spherical linear interpolation along ``path``.

    Args:
        path: Great-circle path descriptor.
        t: Fraction from 0 (start) to 1 (end). Clamped.

    Returns:
        The interpolated point. Coincident endpoints return ``path.from_point``.
    """
    clamped = min(1.0, max(0.0, t))
    ax, ay, az = _to_cartesian(path.from_point)
    bx, by, bz = _to_cartesian(path.to_point)

    dot = ax * bx + ay * by + az * bz
    omega = math.acos(min(1.0, max(-1.0, dot)))
    if omega == 0 or math.isnan(omega):
        return path.from_point

    sin_omega = math.sin(omega)
    if sin_omega < 1e-12:
        if dot > 0:
            return path.from_point
        # Antipodal: every meridian through the start is a great circle to the end.
        return _antipodal_interpolate(path.from_point, clamped)

    factor_a = math.sin((1 - clamped) * omega) / sin_omega
    factor_b = math.sin(clamped * omega) / sin_omega
    return _from_cartesian(
        factor_a * ax + factor_b * bx,
        factor_a * ay + factor_b * by,
        factor_a * az + factor_b * bz,
    )


def _antipodal_interpolate(start: GeoPoint, t: float) -> GeoPoint:
    lat = start.lat + 180.0 * t
    lon = start.lon
    if lat > 90.0:
        lat = 180.0 - lat
        lon = normalize_lon(lon + 180.0)
    return GeoPoint(lat=lat, lon=lon)


def heading_at(path: GreatCirclePath, t: float) -> float:
    """Approximate course over ground at timeline fraction ``t``.

    Uses the bearing between ``t`` and ``t + 1e-4``. At ``t = 1`` there is no
    room to step forward, so the bearing is taken from ``t - 1e-4`` instead.
    """
    t1 = min(1.0, max(0.0, t))
    t2 = min(1.0, t1 + HEADING_STEP)
    if t2 == t1 and t1 - HEADING_STEP >= 0:
        return bearing_degrees(
            interpolate(path, t1 - HEADING_STEP), interpolate(path, t1)
        )
    return bearing_degrees(interpolate(path, t1), interpolate(path, t2))


def project(point: GeoPoint, width: float, height: float) -> ProjectedPoint:
    """Equirectangular projection onto a ``width`` x ``height`` canvas.

    Latitude and longitude are clamped first so the result never leaves the canvas.
    """
    lat = max(-90.0, min(90.0, point.lat))
    lon = max(-180.0, min(180.0, point.lon))
    return ProjectedPoint(
        x=(lon + 180.0) / 360.0 * width,
        y=(90.0 - lat) / 180.0 * height,
    )


def seam_crossing(
    from_point: ProjectedPoint, to_point: ProjectedPoint, width: float
) -> tuple[ProjectedPoint, ProjectedPoint] | None:
    """Where the segment ``from_point -> to_point`` leaves and re-enters the map.

    The segment is assumed to wrap around the seam. Returns the point on the
    edge it leaves through and the matching point on the opposite edge, or
    None when the crossing cannot be located.
    """
    if not math.isfinite(width) or width <= 0:
        return None
    if from_point.x > to_point.x:
        denom = to_point.x + width - from_point.x
        if not math.isfinite(denom) or denom == 0:
            return None
        t = (width - from_point.x) / denom
        y = from_point.y + t * (to_point.y - from_point.y)
        return ProjectedPoint(x=width, y=y), ProjectedPoint(x=0.0, y=y)

    denom = to_point.x - width - from_point.x
    if not math.isfinite(denom) or denom == 0:
        return None
    t = (0 - from_point.x) / denom
    y = from_point.y + t * (to_point.y - from_point.y)
    return ProjectedPoint(x=0.0, y=y), ProjectedPoint(x=width, y=y)


def split_at_seam(
    points: list[ProjectedPoint], width: float
) -> list[list[ProjectedPoint]]:
    """Split a projected polyline wherever it wraps across the map seam.

    A horizontal jump larger than ``width / 2`` between consecutive points is
    treated as a wrap. The crossing is interpolated in x and emitted on both
    edges so each piece runs right up to the border.
    """
    if not math.isfinite(width) or width <= 0:
        return [points]
    if len(points) <= 1:
        return [points] if points else []

    segments: list[list[ProjectedPoint]] = []
    current: list[ProjectedPoint] = [points[0]]
    jump_threshold = width / 2

    for point in points[1:]:
        prev = current[-1]
        if abs(point.x - prev.x) <= jump_threshold:
            current.append(point)
            continue

        crossing = seam_crossing(prev, point, width)
        if crossing is None:
            segments.append(current)
            current = [point]
            continue

        exit_point, entry_point = crossing
        current.append(exit_point)
        segments.append(current)
        current = [entry_point, point]

    segments.append(current)
    return segments
