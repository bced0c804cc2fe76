"""Sun-time summary: integrate sun side and daylight state over a whole flight.

Percentages and minutes are rounded with largest-remainder allocation so each
grouping sums exactly to 100 and to the plan duration.
"""

import logging
import math
from collections.abc import Sequence

from sunside.flight import sample_at
from sunside.models import (
    DaylightStatus,
    FlightPlan,
    FlightSunSummary,
    SunSummaryBucket,
    SunSummaryBucketName,
)

logger = logging.getLogger(__name__)

BUCKET_ORDER: tuple[SunSummaryBucketName, ...] = ("left", "right", "ahead", "behind", "night")
DAYLIGHT_ORDER: tuple[DaylightStatus, ...] = ("day", "twilight", "night")

DEFAULT_INTERVAL_TARGET_MINUTES = 2.0
DEFAULT_MIN_INTERVALS = 180
DEFAULT_MAX_INTERVALS = 5000

_MAX_SAFE_INTEGER = 2**53 - 1


def _clamp_int(value: float, low: int, high: int) -> int:
    if not math.isfinite(value):
        return low
    return min(high, max(low, math.floor(value)))


def _safe(values: Sequence[float]) -> list[float]:
    return [v if math.isfinite(v) and v > 0 else 0.0 for v in values]


def allocate_by_largest_remainder(exact_values: Sequence[float], total: float) -> list[int]:
    """Round ``exact_values`` to integers that sum exactly to ``total``.

    Every value is floored, then the shortfall goes one unit at a time to the
    entries with the largest fractional remainder (lower index wins ties). If
    the floors already overshoot, units are taken back from the positive
    entries with the smallest remainder. Negative and non-finite inputs count
    as zero.
    """
    target = _clamp_int(total, 0, _MAX_SAFE_INTEGER)
    if target == 0:
        return [0] * len(exact_values)

    safe = _safe(exact_values)
    base = [math.floor(v) for v in safe]
    initial_diff = target - sum(base)
    remainders = [(i, v - base[i]) for i, v in enumerate(safe)]

    if initial_diff > 0 and remainders:
        remainders.sort(key=lambda e: (-e[1], e[0]))
        for k in range(initial_diff):
            base[remainders[k % len(remainders)][0]] += 1
    elif initial_diff < 0:
        remainders.sort(key=lambda e: (e[1], e[0]))
        remaining = -initial_diff
        while remaining > 0:
            changed = False
            for i, _ in remainders:
                if remaining == 0:
                    break
                if base[i] <= 0:
                    continue
                base[i] -= 1
                remaining -= 1
                changed = True
            if not changed:
                break

    # Final correction, only reachable with degenerate input.
    diff = target - sum(base)
    if diff > 0 and base:
        base[0] += diff
    elif diff < 0:
        remaining = -diff
        for i in range(len(base)):
            if remaining <= 0:
                break
            take = min(base[i], remaining)
            base[i] -= take
            remaining -= take

    return base


def allocate_percentages_with_minimum(
    exact_percentages: Sequence[float], total: float = 100, min_non_zero: float = 1
) -> list[int]:
    """Largest-remainder percentages where every nonzero entry shows at least ``min_non_zero``.

    Entries that rounded below the minimum are raised to it, and the
    difference is taken from the largest entries above the minimum. Entries
    that are exactly zero stay zero. When the minimum cannot be honoured for
    every nonzero entry the plain largest-remainder result is returned.
    """
    target = _clamp_int(total, 0, 100)
    min_value = _clamp_int(min_non_zero, 0, target)
    safe_exact = _safe(exact_percentages)
    rounded = allocate_by_largest_remainder(safe_exact, target)

    if target == 0 or min_value == 0 or not rounded:
        return rounded

    positive = [v > 0 for v in safe_exact]
    positive_count = sum(positive)
    if positive_count == 0 or positive_count * min_value > target:
        return rounded

    out = list(rounded)
    need: set[int] = set()
    required = 0
    for i, value in enumerate(out):
        if not positive[i] or value >= min_value:
            continue
        need.add(i)
        required += min_value - value
        out[i] = min_value

    if required == 0:
        return out

    donors = sorted(
        (i for i, value in enumerate(out) if positive[i] and i not in need and value > min_value),
        key=lambda i: (-out[i], i),
    )
    available = sum(out[i] - min_value for i in donors)
    if available < required:
        return rounded

    remaining = required
    for i in donors:
        if remaining == 0:
            break
        take = min(out[i] - min_value, remaining)
        out[i] -= take
        remaining -= take

    diff = target - sum(out)
    if diff:
        adjust = donors[0] if donors else positive.index(True)
        out[adjust] += diff

    return out


def _empty_buckets(keys: Sequence[str]) -> dict:
    return {key: SunSummaryBucket(millis=0, fraction=0.0, percent=0, minutes=0) for key in keys}


def _build_buckets(
    keys: Sequence[str], millis: dict[str, int], total_millis: int, total_minutes: int
) -> dict:
    percent_exact = [millis[k] / total_millis * 100 for k in keys]
    minutes_exact = [millis[k] / 60000 for k in keys]
    percents = allocate_percentages_with_minimum(percent_exact, 100, 1)
    minutes = allocate_by_largest_remainder(minutes_exact, total_minutes)
    return {
        key: SunSummaryBucket(
            millis=millis[key],
            fraction=millis[key] / total_millis,
            percent=percents[idx],
            minutes=minutes[idx],
        )
        for idx, key in enumerate(keys)
    }


def interval_count(
    total_millis: int,
    interval_target_minutes: float = DEFAULT_INTERVAL_TARGET_MINUTES,
    min_intervals: int = DEFAULT_MIN_INTERVALS,
    max_intervals: int = DEFAULT_MAX_INTERVALS,
) -> int:
    """Number of integration intervals: ~``interval_target_minutes`` each, clamped."""
    if not interval_target_minutes or interval_target_minutes <= 0:
        interval_target_minutes = DEFAULT_INTERVAL_TARGET_MINUTES
    min_intervals = math.floor(min_intervals) if min_intervals and min_intervals > 0 else DEFAULT_MIN_INTERVALS
    max_intervals = math.floor(max_intervals) if max_intervals and max_intervals > 0 else DEFAULT_MAX_INTERVALS

    target = max(1, math.ceil(total_millis / 60000 / interval_target_minutes))
    intervals = _clamp_int(max(min_intervals, target), 1, max_intervals)
    return min(intervals, max(1, total_millis))


def compute_flight_sun_summary(
    plan: FlightPlan,
    interval_target_minutes: float = DEFAULT_INTERVAL_TARGET_MINUTES,
    min_intervals: int = DEFAULT_MIN_INTERVALS,
    max_intervals: int = DEFAULT_MAX_INTERVALS,
) -> FlightSunSummary:
    """Bucket the whole flight by where the sun is and by daylight state.

    The flight is cut into intervals, each sampled at its midpoint; the
    interval's full span is credited to the sampled sun side (or to ``night``
    when the sun is more than 6 degrees down) and, separately, to its
    daylight state.

    Args:
        plan: Flight plan to summarise.
        interval_target_minutes: Desired simulated minutes per interval.
        min_intervals: Lower bound on the interval count.
        max_intervals: Upper bound on the interval count.

    Returns:
        FlightSunSummary whose percents sum to 100 and minutes to the plan
        duration within each grouping.
    """
    total_millis = max(0, round(plan.arrival_utc - plan.departure_utc))
    total_minutes = max(0, round(plan.duration_minutes))

    if total_millis <= 0:
        return FlightSunSummary(
            total_millis=total_millis,
            total_minutes=total_minutes,
            buckets=_empty_buckets(BUCKET_ORDER),
            daylight=_empty_buckets(DAYLIGHT_ORDER),
        )

    intervals = interval_count(
        total_millis, interval_target_minutes, min_intervals, max_intervals
    )
    logger.debug("Summarising %d ms of flight over %d intervals", total_millis, intervals)

    bucket_millis: dict[str, int] = dict.fromkeys(BUCKET_ORDER, 0)
    status_millis: dict[str, int] = dict.fromkeys(DAYLIGHT_ORDER, 0)

    for i in range(intervals):
        start = plan.departure_utc + (i * total_millis) // intervals
        end = plan.departure_utc + ((i + 1) * total_millis) // intervals
        span = end - start
        if span <= 0:
            continue

        mid = start + span / 2
        sample = sample_at(plan, (mid - plan.departure_utc) / total_millis)
        status_millis[sample.sun.status] += span
        bucket = "night" if sample.sun.status == "night" else sample.sun.side
        bucket_millis[bucket] += span

    return FlightSunSummary(
        total_millis=total_millis,
        total_minutes=total_minutes,
        buckets=_build_buckets(BUCKET_ORDER, bucket_millis, total_millis, total_minutes),
        daylight=_build_buckets(DAYLIGHT_ORDER, status_millis, total_millis, total_minutes),
    )
