"""Data points for the write side: telnet ``put`` lines and JSON batches."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from tsdb_query.errors import CleanError
from tsdb_query.tags import TagSet, clean

logger = logging.getLogger("tsdb_query")

Value = int | float | str


def _to_number(value: Value) -> int | float:
    if not isinstance(value, str):
        return value
    try:
        return int(value, 10)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"unparseable number {value!r}") from None


def _format_value(value: Value) -> str:
    s = repr(value) if isinstance(value, float) else str(value)
    # Integral floats print without the trailing ".0"
    return s[:-2] if s.endswith(".0") else s


@dataclass(frozen=True, slots=True)
class DataPoint:
    """A single value of a time series at a timestamp (POSIX seconds)."""

    metric: str
    timestamp: int
    value: Value
    tags: TagSet = field(default_factory=TagSet)

    def clean(self) -> DataPoint:
        """Return a sanitized copy with a numeric value.

        Raises CleanError for bad identifiers and ValueError for a string
        value that is not a number.
        """
        tags = TagSet(self.tags).clean()
        try:
            metric = clean(self.metric)
        except CleanError as e:
            raise e.annotate(self.metric, e.cleaned) from e
        return DataPoint(metric, self.timestamp, _to_number(self.value), tags)

    def telnet(self) -> str:
        """Return the telnet ``put`` line for this point."""
        d = self.clean()
        tags = "".join(f" {k}={v}" for k, v in d.tags.items())
        return f"put {d.metric} {d.timestamp} {_format_value(d.value)}{tags}\n"

    def to_wire(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "timestamp": self.timestamp,
            "value": self.value,
            "tags": dict(self.tags),
        }


def dumps_datapoints(points: Iterable[DataPoint]) -> str:
    """JSON-encode a batch of points, dropping any that fail to clean."""
    wire = []
    for point in points:
        try:
            cleaned = point.clean()
        except ValueError as e:
            logger.info("%s Removing Datapoint %s", e, point)
            continue
        wire.append(cleaned.to_wire())
    return json.dumps(wire)


__all__ = ["DataPoint", "dumps_datapoints"]
