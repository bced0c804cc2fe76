"""Exceptions raised by the sunside core."""


class SunsideError(Exception):
    """Base class for sunside errors."""


class ChronologyError(SunsideError, ValueError):
    """Arrival instant is not after the departure instant."""


class InvalidTimeError(SunsideError, ValueError):
    """Local time cannot be resolved in the given zone, or the zone is unknown."""


class ConfigError(SunsideError, ValueError):
    """Environment setting could not be parsed."""
