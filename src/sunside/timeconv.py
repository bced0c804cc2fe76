"""Local civil time <-> UTC conversion for IANA zones, built on pytz."""

import logging
import math
from datetime import datetime, timedelta

from pytz import AmbiguousTimeError, NonExistentTimeError, UnknownTimeZoneError
from pytz import timezone, utc

from sunside.errors import InvalidTimeError
from sunside.models import LocalDateTime, ZonedInstant

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=utc)
_MILLISECOND = timedelta(milliseconds=1)


def _zone(name: str):
    try:
        return timezone(name)
    except UnknownTimeZoneError as exc:
        raise InvalidTimeError(f"Unknown time zone: {name}") from exc


def _to_zoned(aware: datetime, zone_name: str) -> ZonedInstant:
    offset = aware.utcoffset() or timedelta(0)
    return ZonedInstant(
        epoch_millis=(aware - _EPOCH) // _MILLISECOND,
        zone=zone_name,
        offset_minutes=int(offset.total_seconds() // 60),
        iso=aware.isoformat(timespec="milliseconds"),
    )


def to_instant(local: LocalDateTime, zone_name: str) -> ZonedInstant:
    """Resolve a wall-clock time in ``zone_name`` to an absolute instant.

    A time that falls inside a spring-forward gap is moved forward by the
    length of the gap (02:30 in a 02:00 -> 03:00 gap becomes 03:30 in the new
    offset). An ambiguous fall-back time resolves to the earlier instant.

    Args:
        local: Wall-clock date and time.
        zone_name: IANA zone identifier.

    Returns:
        ZonedInstant expressed in ``zone_name``.

    Raises:
        InvalidTimeError: Unknown zone or impossible calendar date.
    """
    tz = _zone(zone_name)
    try:
        naive = datetime(local.year, local.month, local.day, local.hour, local.minute)
    except (TypeError, ValueError) as exc:
        raise InvalidTimeError(
            f"Invalid local time for zone {zone_name}: {local}"
        ) from exc

    try:
        aware = tz.localize(naive, is_dst=None)
    except NonExistentTimeError:
        # Interpreting the wall clock with the pre-transition offset and
        # normalizing lands exactly one gap-length later.
        aware = tz.normalize(tz.localize(naive, is_dst=False))
        logger.debug(
            "Shifted %s across DST gap in %s to %s", naive, zone_name, aware
        )
    except AmbiguousTimeError:
        aware = tz.localize(naive, is_dst=True)

    return _to_zoned(aware, tz.zone)


def from_instant(epoch_millis: float, zone_name: str) -> ZonedInstant:
    """Express a UTC epoch-millisecond instant in ``zone_name``.

    Raises:
        InvalidTimeError: Unknown zone, or millis not finite / out of range.
    """
    tz = _zone(zone_name)
    if not math.isfinite(epoch_millis):
        raise InvalidTimeError(f"Invalid UTC millis {epoch_millis} for zone {zone_name}")
    try:
        aware = (_EPOCH + timedelta(milliseconds=epoch_millis)).astimezone(tz)
    except OverflowError as exc:
        raise InvalidTimeError(
            f"Invalid UTC millis {epoch_millis} for zone {zone_name}"
        ) from exc
    return _to_zoned(aware, tz.zone)


def duration_minutes(start_millis: float, end_millis: float) -> int:
    """Whole minutes between two epoch-millisecond instants, rounded."""
    return math.floor((end_millis - start_millis) / 60000 + 0.5)
