"""Duration literal parsing ("1h", "30m", "1h30m")."""

import re
from datetime import timedelta

from tsdb_query.errors import TimeParseError

_DURATION_PATTERN = re.compile(r"(?:\d+(?:\.\d+)?(?:ms|s|m|h|d|w|n|y))+")
_COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d|w|n|y)")
_UNITS: dict[str, timedelta] = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "n": timedelta(days=30),
    "y": timedelta(days=365),
}


def parse_duration(duration: str | timedelta) -> timedelta:
    """Parse a duration literal. Passthrough if already a timedelta."""
    if isinstance(duration, timedelta):
        return duration

    if not _DURATION_PATTERN.fullmatch(duration):
        raise TimeParseError(f"tsdb: invalid duration: {duration!r}")

    total = timedelta()
    for value, unit in _COMPONENT_PATTERN.findall(duration):
        total += float(value) * _UNITS[unit]
    return total
