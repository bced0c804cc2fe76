"""Command line sun report for a single flight.

    uv run sunside-report 33.94,-118.41 "2024-01-15 15:00" 40.64,-73.78 \
        --arrive "2024-01-15 23:30"

Without ``--arrive`` the arrival time is estimated from the distance.
"""

import argparse
import logging
import sys
from datetime import datetime

from dotenv import load_dotenv

from sunside.config import Settings, load_settings
from sunside.daynight import compute_day_night_overlay
from sunside.errors import SunsideError
from sunside.flight import create_flight_plan, estimate_duration_minutes
from sunside.geo import distance_meters
from sunside.models import Airport, FlightSunSummary, GeoPoint, LocalDateTime
from sunside.summary import BUCKET_ORDER, DAYLIGHT_ORDER, compute_flight_sun_summary
from sunside.timeconv import from_instant, to_instant
from sunside.timezone import time_zone_at

logger = logging.getLogger(__name__)

_WHEN_FORMAT = "%Y-%m-%d %H:%M"


def _parse_point(text: str) -> GeoPoint:
    try:
        lat_str, lon_str = text.split(",")
        return GeoPoint(lat=float(lat_str), lon=float(lon_str))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected LAT,LON, got {text!r}") from exc


def _parse_when(text: str) -> LocalDateTime:
    try:
        dt = datetime.strptime(text, _WHEN_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected 'YYYY-MM-DD HH:MM', got {text!r}") from exc
    return LocalDateTime(year=dt.year, month=dt.month, day=dt.day, hour=dt.hour, minute=dt.minute)


def _airport(label: str, point: GeoPoint, zone: str | None) -> Airport:
    if zone is None:
        zone = time_zone_at(point.lat, point.lon)
        if zone is None:
            raise SunsideError(f"No time zone found for {label} at {point.lat},{point.lon}")
    return Airport(id=label, name=label, city=None, country=None, location=point, time_zone=zone)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Where the sun is during a flight")
    parser.add_argument("origin", type=_parse_point, help="departure LAT,LON")
    parser.add_argument("depart", type=_parse_when, help="local departure 'YYYY-MM-DD HH:MM'")
    parser.add_argument("destination", type=_parse_point, help="arrival LAT,LON")
    parser.add_argument("--arrive", type=_parse_when, help="local arrival 'YYYY-MM-DD HH:MM'")
    parser.add_argument("--origin-zone", help="IANA zone of the departure (default: looked up)")
    parser.add_argument("--destination-zone", help="IANA zone of the arrival (default: looked up)")
    parser.add_argument("--overlay", action="store_true",
                        help="also print day/night overlay paths at departure")
    return parser


def format_summary(summary: FlightSunSummary) -> str:
    lines = [f"Duration: {summary.total_minutes} min"]
    for key in BUCKET_ORDER:
        b = summary.buckets[key]
        lines.append(f"  {key:<8} {b.percent:>3}%  {b.minutes:>5} min")
    lines.append("Daylight:")
    for key in DAYLIGHT_ORDER:
        b = summary.daylight[key]
        lines.append(f"  {key:<8} {b.percent:>3}%  {b.minutes:>5} min")
    return "\n".join(lines)


def run(args: argparse.Namespace, settings: Settings) -> str:
    """Build the plan from parsed arguments and render the text report."""
    origin = _airport("origin", args.origin, args.origin_zone)
    destination = _airport("destination", args.destination, args.destination_zone)

    departure = to_instant(args.depart, origin.time_zone)
    if args.arrive is not None:
        arrival = to_instant(args.arrive, destination.time_zone)
    else:
        minutes = estimate_duration_minutes(
            distance_meters(origin.location, destination.location),
            cruise_speed_kmh=settings.cruise_speed_kmh,
        )
        logger.info("No arrival given, estimating %d min", minutes)
        arrival = from_instant(departure.epoch_millis + minutes * 60_000, destination.time_zone)

    plan = create_flight_plan(origin, destination, departure, arrival)
    summary = compute_flight_sun_summary(
        plan,
        interval_target_minutes=settings.interval_minutes,
        min_intervals=settings.min_intervals,
        max_intervals=settings.max_intervals,
    )

    out = [
        f"Depart {departure.iso} ({origin.time_zone})",
        f"Arrive {arrival.iso} ({destination.time_zone})",
        f"Distance: {plan.path.distance_meters / 1000:.0f} km",
        format_summary(summary),
    ]
    if args.overlay:
        overlay = compute_day_night_overlay(
            plan.departure_utc,
            settings.map_width,
            settings.map_height,
            settings.overlay_samples,
        )
        out.append(f"Subsolar: {overlay.subsolar.lat:.2f}, {overlay.subsolar.lon:.2f}")
        out.append(f"terminator: {overlay.terminator_path}")
        out.append(f"day: {overlay.day_path}")
        out.append(f"night: {overlay.night_path}")
        out.append(f"twilight: {overlay.twilight_path}")
    return "\n".join(out)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args = build_parser().parse_args(argv)
    try:
        print(run(args, settings))
    except SunsideError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
