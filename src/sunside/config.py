"""Runtime settings read from ``SUNSIDE_*`` environment variables.

Entry points call ``load_dotenv()`` first so a local ``.env`` file can
provide them.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from sunside.errors import ConfigError


@dataclass(frozen=True)
class Settings:
    """Tunables for the overlay, the summary and the duration estimate."""

    map_width: int = 1800
    map_height: int = 900
    overlay_samples: int = 361
    interval_minutes: float = 2.0
    min_intervals: int = 180
    max_intervals: int = 5000
    cruise_speed_kmh: float = 900.0
    log_level: str = "WARNING"


_INT_FIELDS = {
    "map_width": "SUNSIDE_MAP_WIDTH",
    "map_height": "SUNSIDE_MAP_HEIGHT",
    "overlay_samples": "SUNSIDE_OVERLAY_SAMPLES",
    "min_intervals": "SUNSIDE_MIN_INTERVALS",
    "max_intervals": "SUNSIDE_MAX_INTERVALS",
}
_FLOAT_FIELDS = {
    "interval_minutes": "SUNSIDE_INTERVAL_MINUTES",
    "cruise_speed_kmh": "SUNSIDE_CRUISE_SPEED_KMH",
}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment, falling back to defaults.

    Args:
        environ: Mapping to read instead of ``os.environ`` (for tests).

    Raises:
        ConfigError: A variable is set but cannot be parsed.
    """
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}

    for field, var in _INT_FIELDS.items():
        raw = env.get(var)
        if raw is None or raw.strip() == "":
            continue
        try:
            values[field] = int(raw)
        except ValueError as exc:
            raise ConfigError(f"{var} must be an integer, got {raw!r}") from exc

    for field, var in _FLOAT_FIELDS.items():
        raw = env.get(var)
        if raw is None or raw.strip() == "":
            continue
        try:
            values[field] = float(raw)
        except ValueError as exc:
            raise ConfigError(f"{var} must be a number, got {raw!r}") from exc

    level = env.get("SUNSIDE_LOG_LEVEL")
    if level:
        level = level.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"SUNSIDE_LOG_LEVEL is not a logging level: {level!r}")
        values["log_level"] = level

    return Settings(**values)
