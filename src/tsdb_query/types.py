"""Core types for tsdb_query."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from tsdb_query.tags import TagSet

_AGO_SUFFIX = "-ago"


@dataclass(frozen=True, slots=True)
class RelativeTime:
    """A window edge relative to now, e.g. ``1h-ago``."""

    duration: str  # "1h", without the -ago suffix

    def __str__(self) -> str:
        return f"{self.duration}{_AGO_SUFFIX}"

    def to_wire(self) -> str:
        return str(self)


@dataclass(frozen=True, slots=True)
class AbsoluteTime:
    """A window edge written as a date layout or epoch text.

    The empty string means "now".
    """

    text: str

    def __str__(self) -> str:
        return self.text

    def to_wire(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class EpochTime:
    """A window edge in POSIX seconds."""

    seconds: int

    def __str__(self) -> str:
        return str(self.seconds)

    def to_wire(self) -> int:
        return self.seconds


TimeExpr = Union[RelativeTime, AbsoluteTime, EpochTime]

# Anything accepted where a TimeExpr is expected
TimeLike = Union[TimeExpr, str, int]


def to_time_expr(value: TimeLike) -> TimeExpr:
    """Classify a raw start/end value into its TimeExpr variant."""
    if isinstance(value, (RelativeTime, AbsoluteTime, EpochTime)):
        return value
    if isinstance(value, bool):
        raise TypeError("time must be a str or int, got bool")
    if isinstance(value, int):
        return EpochTime(value)
    if isinstance(value, str):
        if value.endswith(_AGO_SUFFIX):
            return RelativeTime(value[: -len(_AGO_SUFFIX)])
        return AbsoluteTime(value)
    raise TypeError(f"time must be a str or int, got {type(value).__name__}")


@dataclass(slots=True)
class RateOptions:
    """Counter handling for rate queries."""

    counter: bool = False
    counter_max: int = 0
    reset_value: int = 0

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        if self.counter:
            wire["counter"] = True
        if self.counter_max:
            wire["counterMax"] = self.counter_max
        if self.reset_value:
            wire["resetValue"] = self.reset_value
        return wire


@dataclass(slots=True)
class Response:
    """One time series returned by a query."""

    metric: str
    tags: TagSet
    aggregate_tags: list[str] = field(default_factory=list)
    dps: dict[str, float] = field(default_factory=dict)  # timestamp -> value

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Response:
        return cls(
            metric=data["metric"],
            tags=TagSet(data.get("tags") or {}),
            aggregate_tags=list(data.get("aggregateTags") or []),
            dps={ts: float(v) for ts, v in (data.get("dps") or {}).items()},
        )


ResponseSet = list[Response]
