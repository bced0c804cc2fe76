"""IANA time zone lookup from coordinates, backed by timezonefinder."""

import logging
import math
from collections.abc import Iterable

from timezonefinder import TimezoneFinder

from sunside.errors import InvalidTimeError
from sunside.models import GeoPoint, LocalZoneInfo
from sunside.timeconv import from_instant

logger = logging.getLogger(__name__)

_tf = TimezoneFinder()

DEFAULT_FALLBACK_ZONE = "UTC"


def _wrap_lon(lon: float) -> float:
    wrapped = (lon + 180.0) % 360.0 - 180.0
    # Keep an exact antimeridian on the +180 side.
    return 180.0 if wrapped == -180.0 else wrapped


def time_zone_at(lat: float, lon: float) -> str | None:
    """IANA zone at a coordinate, or None when the input is not usable.

    Latitude is clamped to [-90, 90] and longitude wrapped, so 359.87 E is
    looked up as 0.13 W.
    """
    if not math.isfinite(lat) or not math.isfinite(lon):
        return None
    safe_lat = min(90.0, max(-90.0, lat))
    safe_lon = _wrap_lon(lon)
    try:
        return _tf.timezone_at(lat=safe_lat, lng=safe_lon)
    except ValueError:
        logger.warning("Time zone lookup failed for lat=%s lon=%s", lat, lon)
        return None


def local_zone_info_at(epoch_millis: float, lat: float, lon: float) -> LocalZoneInfo | None:
    """Zone name and UTC offset in effect at a place and instant."""
    if not math.isfinite(epoch_millis):
        return None
    zone = time_zone_at(lat, lon)
    if zone is None:
        return None
    try:
        zoned = from_instant(epoch_millis, zone)
    except InvalidTimeError:
        logger.warning("Zone %s at lat=%s lon=%s is not known to pytz", zone, lat, lon)
        return None
    return LocalZoneInfo(time_zone=zone, offset_minutes=zoned.offset_minutes)


def zones_for_samples(
    locations: Iterable[GeoPoint],
    departure_zone: str | None = None,
    arrival_zone: str | None = None,
    fallback_zone: str = DEFAULT_FALLBACK_ZONE,
) -> list[str]:
    """One zone per location along a route.

    The first and last entries are replaced by ``departure_zone`` and
    ``arrival_zone`` when given, so endpoints match the airports' declared
    zones. Failed lookups use ``fallback_zone``.
    """
    out = [time_zone_at(p.lat, p.lon) or fallback_zone for p in locations]
    if not out:
        return out
    if departure_zone:
        out[0] = departure_zone
    if arrival_zone:
        out[-1] = arrival_zone
    return out
