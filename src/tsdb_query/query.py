"""Query and request models, with the textual query grammar.

Provides:
- parse_query(): ``avg:15s-avg:rate:cpu{host=web01}`` -> Query
- parse_request(): ``start=1h-ago&m=avg:cpu`` -> Request
- request_from_json(): wire JSON -> Request
- Request.to_json(): canonical serialized form, used as the cache key
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import parse_qs, urlencode

from tsdb_query.errors import MarshalError, QueryFormatError, RequestFormatError
from tsdb_query.tags import TagSet, parse_tags
from tsdb_query.timeparse import get_duration
from tsdb_query.types import EpochTime, RateOptions, TimeExpr, TimeLike, to_time_expr

_QUERY_PATTERN = re.compile(
    r"^(\w+):(?:(\w+-\w+):)?(?:(rate[^:]*):)?([\w./]+)(?:\{([\w./,=*-|]+)\})?$",
    re.ASCII,
)
_RATE_PREFIX = "rate"
_MIN_DOWNSAMPLE_SECONDS = 15


def _parse_int(field_name: str, value: str, query: str) -> int:
    try:
        return int(value, 10)
    except ValueError:
        raise QueryFormatError(
            f"tsdb: bad {field_name} {value!r} in query: {query}"
        ) from None


def _parse_rate(spec: str, query: str) -> RateOptions:
    """Parse ``rate``, ``rate{counter,max,reset}`` or ``rate,counter,max,reset``.

    Any other text after ``rate`` is a plain rate without options.
    """
    body = spec[len(_RATE_PREFIX) :]
    if body.startswith("{") and body.endswith("}"):
        inner = body[1:-1]
        fields = [_RATE_PREFIX, *inner.split(",")] if inner else [_RATE_PREFIX]
    else:
        fields = spec.split(",")

    options = RateOptions(counter=len(fields) > 1)
    if len(fields) > 2 and fields[2] != "":
        options.counter_max = _parse_int("counter max", fields[2], query)
    if len(fields) > 3:
        options.reset_value = _parse_int("reset value", fields[3], query)
    return options


@dataclass(slots=True)
class Query:
    """A single metric query."""

    aggregator: str
    metric: str
    rate: bool = False
    rate_options: RateOptions = field(default_factory=RateOptions)
    downsample: str = ""
    tags: TagSet = field(default_factory=TagSet)

    def __post_init__(self) -> None:
        if not isinstance(self.tags, TagSet):
            self.tags = TagSet(self.tags)

    def __str__(self) -> str:
        # Tags keep insertion order here, unlike TagSet.tags()
        s = self.aggregator + ":"
        if self.downsample:
            s += self.downsample + ":"
        if self.rate:
            s += "rate:"
        s += self.metric
        if self.tags:
            s += "{" + ",".join(f"{k}={v}" for k, v in self.tags.items()) + "}"
        return s

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {
            "aggregator": self.aggregator,
            "metric": self.metric,
        }
        if self.rate:
            wire["rate"] = True
            wire["rateOptions"] = self.rate_options.to_wire()
        if self.downsample:
            wire["downsample"] = self.downsample
        if self.tags:
            wire["tags"] = dict(self.tags)
        return wire

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Query:
        opts = data.get("rateOptions") or {}
        return cls(
            aggregator=data["aggregator"],
            metric=data["metric"],
            rate=bool(data.get("rate", False)),
            rate_options=RateOptions(
                counter=bool(opts.get("counter", False)),
                counter_max=int(opts.get("counterMax", 0)),
                reset_value=int(opts.get("resetValue", 0)),
            ),
            downsample=data.get("downsample") or "",
            tags=TagSet(data.get("tags") or {}),
        )


def parse_query(query: str) -> Query:
    """Parse an OpenTSDB query of the form ``avg:rate:cpu{k=v}``."""
    m = _QUERY_PATTERN.match(query)
    if m is None:
        raise QueryFormatError(f"tsdb: bad query format: {query}")
    aggregator, downsample, rate_spec, metric, tag_text = m.groups()

    q = Query(aggregator=aggregator, metric=metric, downsample=downsample or "")
    if rate_spec:
        q.rate = True
        q.rate_options = _parse_rate(rate_spec, query)
    if tag_text:
        q.tags = parse_tags(tag_text)
    return q


@dataclass(slots=True)
class Request:
    """A set of queries over one time window.

    ``start`` and ``end`` accept a TimeExpr or raw str/int, which is
    classified on construction. ``end=None`` means now.
    """

    start: TimeExpr
    queries: list[Query] = field(default_factory=list)
    end: TimeExpr | None = None
    no_annotations: bool = False
    global_annotations: bool = False
    ms_resolution: bool = False
    show_tsuids: bool = False

    def __post_init__(self) -> None:
        self.start = to_time_expr(self.start)
        if self.end is not None:
            self.end = to_time_expr(self.end)

    def __str__(self) -> str:
        """Encode as ``end=..&m=..&start=..``, keys sorted."""
        params: list[tuple[str, str]] = []
        end = "" if self.end is None else str(self.end)
        if end:
            params.append(("end", end))
        params.extend(("m", str(q)) for q in self.queries)
        params.append(("start", str(self.start)))
        return urlencode(params)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"start": self.start.to_wire()}
        if self.end is not None:
            wire["end"] = self.end.to_wire()
        wire["queries"] = [q.to_wire() for q in self.queries]
        if self.no_annotations:
            wire["noAnnotations"] = True
        if self.global_annotations:
            wire["globalAnnotations"] = True
        if self.ms_resolution:
            wire["msResolution"] = True
        if self.show_tsuids:
            wire["showTSUIDs"] = True
        return wire

    def to_json(self) -> str:
        """Canonical JSON encoding of the request."""
        try:
            return json.dumps(self.to_wire(), sort_keys=True, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise MarshalError(f"tsdb: cannot encode request: {e}") from e

    def auto_downsample(self, points: int, *, now: datetime | None = None) -> None:
        """Set an avg downsample on every query so the window yields ~points."""
        if points <= 0:
            raise ValueError("tsdb: target length must be > 0")
        interval = get_duration(self, now=now) / points
        if interval.total_seconds() < _MIN_DOWNSAMPLE_SECONDS:
            return
        ds = f"{int(interval.total_seconds())}s-avg"
        for q in self.queries:
            q.downsample = ds


def parse_request(text: str) -> Request:
    """Parse an OpenTSDB request of the form ``start=1h-ago&m=avg:cpu``."""
    values = parse_qs(text, keep_blank_values=True)
    start = next(iter(values.get("start", [])), "")
    if not start:
        raise RequestFormatError(f"tsdb: missing start: {text}")
    queries = [parse_query(m) for m in values.get("m", [])]
    if not queries:
        raise RequestFormatError(f"tsdb: missing m: {text}")
    end = next(iter(values.get("end", [])), "")
    return Request(start, queries, end or None)


def _wire_time(value: Any) -> TimeLike:
    if isinstance(value, float):
        return EpochTime(int(value))
    return value


def request_from_json(data: str | bytes) -> Request:
    """Decode a JSON-encoded request."""
    try:
        raw = json.loads(data)
    except ValueError as e:
        raise RequestFormatError(f"tsdb: bad request json: {e}") from e
    if not isinstance(raw, dict) or "start" not in raw:
        raise RequestFormatError(f"tsdb: missing start: {data!r}")
    queries = [Query.from_wire(q) for q in raw.get("queries") or []]
    if not queries:
        raise RequestFormatError(f"tsdb: missing m: {data!r}")
    end = raw.get("end")
    return Request(
        _wire_time(raw["start"]),
        queries,
        None if end is None else _wire_time(end),
        no_annotations=bool(raw.get("noAnnotations", False)),
        global_annotations=bool(raw.get("globalAnnotations", False)),
        ms_resolution=bool(raw.get("msResolution", False)),
        show_tsuids=bool(raw.get("showTSUIDs", False)),
    )


__all__ = [
    "Query",
    "Request",
    "parse_query",
    "parse_request",
    "request_from_json",
]
