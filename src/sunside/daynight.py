"""Day/night overlay: terminator, day, night and civil-twilight polygons as path strings.

Paths use absolute ``M``/``L``/``Z`` commands on an equirectangular canvas.
Every coordinate is rounded to one decimal with ``-0`` normalised to ``0``,
so the same instant always yields byte-identical strings.
"""

import logging
import math
from datetime import datetime

import numpy as np

from sunside.geo import normalize_lon, project, seam_crossing
from sunside.models import DayNightOverlay, GeoPoint, ProjectedPoint, SubsolarPoint
from sunside.sun import (
    CIVIL_TWILIGHT_DEG,
    altitude_contour_latitude,
    build_contour_basis,
    sample_altitude_contour,
    subsolar_point,
    terminator_latitude,
)

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 1800
DEFAULT_HEIGHT = 900
DEFAULT_SAMPLES = 361
# Declinations within ~0.001 deg (a few minutes around an equinox) are
# treated as zero; the longitude-indexed solver is ill-conditioned there.
EQUINOX_LAT_EPS_DEG = 1e-3


def compute_day_night_overlay(
    instant: datetime | float,
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    samples: int = DEFAULT_SAMPLES,
) -> DayNightOverlay:
    """Build the day/night overlay for one instant.

    Args:
        instant: Epoch milliseconds or a datetime (naive means UTC).
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        samples: Number of longitudes (or circle points near an equinox).

    Returns:
        DayNightOverlay. All paths are empty when the canvas has no area.
    """
    subsolar = subsolar_point(instant)
    sun = project(GeoPoint(lat=subsolar.lat, lon=subsolar.lon), width, height)

    if width <= 0 or height <= 0:
        return DayNightOverlay(
            subsolar=subsolar,
            sun=sun,
            terminator_path="",
            day_path="",
            night_path="",
            twilight_path="",
        )

    twilight_path = _twilight_band_path(subsolar, width, height, samples)

    if abs(subsolar.lat) <= EQUINOX_LAT_EPS_DEG:
        logger.debug("Subsolar latitude %.6f within equinox band", subsolar.lat)
        terminator_path, day_path, night_path = _equinox_paths(subsolar, width, height)
    else:
        terminator = _sample_terminator_by_longitude(subsolar, width, height, samples)
        terminator_path = _polyline_path(terminator)
        north = f"{terminator_path} L {_fmt(width)} 0.0 L 0.0 0.0 Z"
        south = f"{terminator_path} L {_fmt(width)} {_fmt(height)} L 0.0 {_fmt(height)} Z"
        if subsolar.lat > 0:
            day_path, night_path = north, south
        else:
            day_path, night_path = south, north

    return DayNightOverlay(
        subsolar=subsolar,
        sun=sun,
        terminator_path=terminator_path,
        day_path=day_path,
        night_path=night_path,
        twilight_path=twilight_path,
    )


def _fmt(value: float) -> str:
    v = math.floor(float(value) * 10 + 0.5) / 10
    if v == 0:
        v = 0.0  # drops the sign of -0.0
    return f"{v:.1f}"


def _polyline_path(points: list[ProjectedPoint]) -> str:
    if not points:
        return ""
    first, *rest = points
    parts = [f"M {_fmt(first.x)} {_fmt(first.y)}"]
    parts.extend(f"L {_fmt(p.x)} {_fmt(p.y)}" for p in rest)
    return " ".join(parts)


def _band_polygon_path(inner: list[ProjectedPoint], outer: list[ProjectedPoint]) -> str:
    """Ribbon polygon: inner edge forwards, outer edge backwards."""
    if not inner or len(inner) != len(outer):
        return ""
    return f"{_polyline_path(inner + outer[::-1])} Z"


def _lon_to_x(lon_deg: float, width: float) -> float:
    return (lon_deg + 180.0) / 360.0 * width


def _project_arrays(
    lats: np.ndarray, lons: np.ndarray, width: float, height: float
) -> list[ProjectedPoint]:
    xs = (np.clip(lons, -180.0, 180.0) + 180.0) / 360.0 * width
    ys = (90.0 - np.clip(lats, -90.0, 90.0)) / 180.0 * height
    return [ProjectedPoint(x=float(x), y=float(y)) for x, y in zip(xs, ys)]


def _sample_longitudes(samples: int, minimum: int) -> np.ndarray:
    return np.linspace(-180.0, 180.0, max(minimum, int(samples)))


def _sample_terminator_by_longitude(
    subsolar: SubsolarPoint, width: float, height: float, samples: int
) -> list[ProjectedPoint]:
    lons = _sample_longitudes(samples, 2)
    lats = terminator_latitude(subsolar, lons)
    return _project_arrays(lats, lons, width, height)


def _equinox_paths(
    subsolar: SubsolarPoint, width: float, height: float
) -> tuple[str, str, str]:
    """Terminator meridians and day/night rectangles when the declination is ~0."""
    x1 = _lon_to_x(normalize_lon(subsolar.lon - 90), width)
    x2 = _lon_to_x(normalize_lon(subsolar.lon + 90), width)

    terminator_path = f"{_vertical_line_path(x1, height)} {_vertical_line_path(x2, height)}"

    day_rects: list[str] = []
    night_rects: list[str] = []
    if x1 <= x2:
        _push_rect(day_rects, x1, x2, width, height)
        _push_rect(night_rects, 0, x1, width, height)
        _push_rect(night_rects, x2, width, width, height)
    else:
        _push_rect(day_rects, 0, x2, width, height)
        _push_rect(day_rects, x1, width, width, height)
        _push_rect(night_rects, x2, x1, width, height)

    return terminator_path, " ".join(day_rects), " ".join(night_rects)


def _vertical_line_path(x: float, height: float) -> str:
    cx = max(0.0, x)
    return f"M {_fmt(cx)} 0.0 L {_fmt(cx)} {_fmt(height)}"


def _push_rect(out: list[str], x0: float, x1: float, width: float, height: float) -> None:
    start = min(width, max(0.0, min(x0, x1)))
    end = min(width, max(0.0, max(x0, x1)))
    if end - start <= 1e-6:
        return
    out.append(
        f"M {_fmt(start)} 0.0 L {_fmt(end)} 0.0 "
        f"L {_fmt(end)} {_fmt(height)} L {_fmt(start)} {_fmt(height)} Z"
    )


# --- Twilight band ---


def _twilight_band_path(
    subsolar: SubsolarPoint, width: float, height: float, samples: int
) -> str:
    count = max(3, int(samples))
    if abs(subsolar.lat) <= EQUINOX_LAT_EPS_DEG:
        return _twilight_band_by_contour(subsolar, width, height, count)
    return _twilight_band_by_longitude(subsolar, width, height, count)


def _twilight_band_by_longitude(
    subsolar: SubsolarPoint, width: float, height: float, samples: int
) -> str:
    lons = _sample_longitudes(samples, 3)
    term_lats = terminator_latitude(subsolar, lons)
    # Polar caps with no -6 deg crossing fall back to the night-side pole.
    fallback = -90.0 if subsolar.lat > 0 else 90.0
    civil_lats = np.empty_like(lons)
    for i, (lon, lat) in enumerate(zip(lons, term_lats)):
        civil = altitude_contour_latitude(
            subsolar, float(lon), CIVIL_TWILIGHT_DEG, float(lat)
        )
        civil_lats[i] = fallback if civil is None else civil

    inner = _project_arrays(term_lats, lons, width, height)
    outer = _project_arrays(civil_lats, lons, width, height)
    return _band_polygon_path(inner, outer)


def _twilight_band_by_contour(
    subsolar: SubsolarPoint, width: float, height: float, samples: int
) -> str:
    """Twilight ribbon from the exact spherical circles, split at the seam."""
    basis = build_contour_basis(subsolar)
    terminator = sample_altitude_contour(basis, 0.0, samples)
    civil = sample_altitude_contour(basis, CIVIL_TWILIGHT_DEG, samples)
    if not terminator or len(terminator) != len(civil):
        return ""

    term_lons = _unwrap_longitudes([p.lon for p in terminator])
    civil_lons = _align_longitudes(term_lons, [p.lon for p in civil])

    term_proj = [
        project(GeoPoint(lat=p.lat, lon=normalize_lon(lon)), width, height)
        for p, lon in zip(terminator, term_lons)
    ]
    civil_proj = [
        project(GeoPoint(lat=p.lat, lon=normalize_lon(lon)), width, height)
        for p, lon in zip(civil, civil_lons)
    ]

    start = _find_right_to_left_seam_index(term_proj, width)
    return _split_band_at_seam(
        _rotate(term_proj, start), _rotate(civil_proj, start), width
    )


def _unwrap_longitudes(lons: list[float]) -> list[float]:
    if not lons:
        return []
    out = [lons[0]]
    for lon in lons[1:]:
        prev = out[-1]
        while lon - prev > 180:
            lon -= 360
        while lon - prev < -180:
            lon += 360
        out.append(lon)
    return out


def _align_longitudes(reference: list[float], raw: list[float]) -> list[float]:
    """Shift each raw longitude by whole turns to sit next to its reference."""
    if not reference or len(reference) != len(raw):
        return raw
    out: list[float] = []
    for base, target in zip(raw, reference):
        lon = base + 360 * math.floor((target - base) / 360 + 0.5)
        if out:
            prev = out[-1]
            while lon - prev > 180:
                lon -= 360
            while lon - prev < -180:
                lon += 360
        out.append(lon)
    return out


def _find_right_to_left_seam_index(points: list[ProjectedPoint], width: float) -> int:
    if len(points) < 2 or not math.isfinite(width) or width <= 0:
        return 0
    jump_threshold = width / 2
    for i in range(1, len(points)):
        prev, cur = points[i - 1], points[i]
        if abs(cur.x - prev.x) > jump_threshold and prev.x > cur.x:
            return i
    return 0


def _rotate(items: list, start: int) -> list:
    if not items:
        return items
    idx = start % len(items)
    return items[idx:] + items[:idx]


def _split_band_at_seam(
    inner: list[ProjectedPoint], outer: list[ProjectedPoint], width: float
) -> str:
    """Split a ribbon at the map seam, cutting inner and outer edges together."""
    if len(inner) < 2 or len(inner) != len(outer):
        return ""
    if not math.isfinite(width) or width <= 0:
        return _band_polygon_path(inner, outer)

    jump_threshold = width / 2
    paths: list[str] = []
    cur_inner = [inner[0]]
    cur_outer = [outer[0]]

    def flush() -> None:
        if len(cur_inner) >= 2 and len(cur_outer) >= 2:
            paths.append(_band_polygon_path(cur_inner, cur_outer))

    for i in range(1, len(inner)):
        prev_i, cur_i = inner[i - 1], inner[i]
        prev_o, cur_o = outer[i - 1], outer[i]

        if abs(cur_i.x - prev_i.x) <= jump_threshold:
            cur_inner.append(cur_i)
            cur_outer.append(cur_o)
            continue

        seam = seam_crossing(prev_i, cur_i, width)
        seam_outer = seam_crossing(prev_o, cur_o, width)
        if seam is None or seam_outer is None:
            flush()
            cur_inner = [cur_i]
            cur_outer = [cur_o]
            continue

        cur_inner.append(seam[0])
        cur_outer.append(seam_outer[0])
        flush()
        cur_inner = [seam[1], cur_i]
        cur_outer = [seam_outer[1], cur_o]

    flush()
    return " ".join(paths)
