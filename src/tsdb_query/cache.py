"""Request-level result caches.

Cache memoizes results by the request's canonical JSON; DateCache first
moves each request's window so it ends at a fixed reference instant, so that
relative windows issued at different moments share one entry.

Neither class is thread-safe: the backing store is a plain dict, so callers
sharing an instance across threads must serialize access themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from tsdb_query.query import Request
from tsdb_query.timeparse import as_utc, parse_time, to_unix, utcnow
from tsdb_query.transports.base import Context
from tsdb_query.types import EpochTime, ResponseSet

logger = logging.getLogger("tsdb_query")


@dataclass(frozen=True, slots=True)
class CacheResult:
    """The outcome of one transport call, success or failure."""

    response_set: ResponseSet | None
    error: Exception | None = None

    def unwrap(self) -> ResponseSet:
        if self.error is not None:
            raise self.error.with_traceback(None)
        assert self.response_set is not None
        return self.response_set


class Cache:
    """Memoizes query results, errors included, for its whole lifetime."""

    def __init__(self, transport: Context) -> None:
        self._transport = transport
        self._cache: dict[str, CacheResult] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def query(self, request: Request) -> ResponseSet:
        """Return the cached result for request, querying on a miss.

        A failed query is stored too and raised again on later hits.
        """
        key = request.to_json()
        result = self._cache.get(key)
        if result is not None:
            logger.debug("tsdb: cache hit %s", key)
            return result.unwrap()

        logger.debug("tsdb: cache miss %s", key)
        try:
            result = CacheResult(self._transport.query(request))
        except Exception as e:
            result = CacheResult(None, e)
        self._cache[key] = result
        return result.unwrap()


class DateCache(Cache):
    """A Cache whose request windows are pinned to end at ``now``."""

    def __init__(self, transport: Context, now: datetime) -> None:
        super().__init__(transport)
        self.now = as_utc(now)

    def query(self, request: Request) -> ResponseSet:
        wall = utcnow()
        start = parse_time(request.start, now=wall)
        end = wall if request.end is None else parse_time(request.end, now=wall)
        shift = self.now - end
        pinned = replace(
            request,
            start=EpochTime(to_unix(start + shift)),
            end=EpochTime(to_unix(end + shift)),
        )
        return super().query(pinned)


__all__ = ["Cache", "CacheResult", "DateCache"]
