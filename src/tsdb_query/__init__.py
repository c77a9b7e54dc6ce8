"""tsdb_query - OpenTSDB query language, time resolution and result caching."""

# Cache
from tsdb_query.cache import Cache, CacheResult, DateCache

# Write side
from tsdb_query.datapoint import DataPoint, dumps_datapoints

# Duration parsing
from tsdb_query.duration import parse_duration

# Errors
from tsdb_query.errors import (
    CleanError,
    CleanReason,
    MarshalError,
    QueryFormatError,
    RemoteError,
    RequestFormatError,
    TimeParseError,
    TransportError,
    TSDBError,
)

# Query language
from tsdb_query.query import (
    Query,
    Request,
    parse_query,
    parse_request,
    request_from_json,
)
from tsdb_query.tags import TagSet, clean, parse_tags

# Time resolution
from tsdb_query.timeparse import get_duration, parse_abs_time, parse_time

# Transports
from tsdb_query.transports import Context, Host

# Core types
from tsdb_query.types import (
    AbsoluteTime,
    EpochTime,
    RateOptions,
    RelativeTime,
    Response,
    ResponseSet,
    TimeExpr,
)

__version__ = "0.1.0"

__all__ = [
    "AbsoluteTime",
    "Cache",
    "CacheResult",
    "CleanError",
    "CleanReason",
    "Context",
    "DataPoint",
    "DateCache",
    "EpochTime",
    "Host",
    "MarshalError",
    "Query",
    "QueryFormatError",
    "RateOptions",
    "RelativeTime",
    "RemoteError",
    "Request",
    "RequestFormatError",
    "Response",
    "ResponseSet",
    "TSDBError",
    "TagSet",
    "TimeExpr",
    "TimeParseError",
    "TransportError",
    "clean",
    "dumps_datapoints",
    "get_duration",
    "parse_abs_time",
    "parse_duration",
    "parse_query",
    "parse_request",
    "parse_tags",
    "parse_time",
    "request_from_json",
]
