"""Resolution of OpenTSDB-style time expressions to instants and durations."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from tsdb_query.duration import parse_duration
from tsdb_query.errors import TimeParseError
from tsdb_query.types import (
    AbsoluteTime,
    EpochTime,
    RelativeTime,
    TimeLike,
    to_time_expr,
)

if TYPE_CHECKING:
    from tsdb_query.query import Request

_ABS_TIME_FORMATS = (
    "%Y/%m/%d-%H:%M:%S",
    "%Y/%m/%d-%H:%M",
    "%Y/%m/%d-%H",
    "%Y/%m/%d",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(t: datetime) -> datetime:
    """Return t as an aware datetime, reading naive values as UTC."""
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t


def from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, timezone.utc)


def to_unix(t: datetime) -> int:
    """POSIX seconds of t, rounded down."""
    return math.floor(t.timestamp())


def parse_abs_time(s: str) -> datetime:
    """Return the time of s, which must be a non-relative (not "X-ago") format.

    Date layouts are tried first, then s is read as epoch seconds.
    """
    for fmt in _ABS_TIME_FORMATS:
        try:
            return datetime.strptime(s, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        seconds = int(s, 10)
    except ValueError:
        raise TimeParseError(f"tsdb: unparseable time: {s!r}") from None
    return from_unix(seconds)


def parse_time(v: TimeLike, *, now: datetime | None = None) -> datetime:
    """Return the time of v, which can be of any format OpenTSDB accepts.

    Relative expressions and the empty string resolve against ``now``,
    sampled from the wall clock when not given.
    """
    now = utcnow() if now is None else as_utc(now)
    expr = to_time_expr(v)
    if isinstance(expr, RelativeTime):
        return now - parse_duration(expr.duration)
    if isinstance(expr, AbsoluteTime):
        if not expr.text:
            return now
        return parse_abs_time(expr.text)
    if isinstance(expr, EpochTime):
        return from_unix(expr.seconds)
    raise TypeError(f"unsupported time expression: {expr!r}")


def get_duration(request: Request, *, now: datetime | None = None) -> timedelta:
    """Return the duration from the request's start to end.

    A missing end means now. The result is negative when end precedes start.
    """
    if isinstance(request.start, AbsoluteTime) and not request.start.text:
        raise TimeParseError("start time must be provided")
    now = utcnow() if now is None else as_utc(now)
    start = parse_time(request.start, now=now)
    end = now if request.end is None else parse_time(request.end, now=now)
    return end - start


__all__ = [
    "as_utc",
    "from_unix",
    "get_duration",
    "parse_abs_time",
    "parse_time",
    "to_unix",
    "utcnow",
]
