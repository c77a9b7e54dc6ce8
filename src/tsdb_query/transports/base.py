"""Base protocol for query backends."""

from typing import Protocol, runtime_checkable

from tsdb_query.query import Request
from tsdb_query.types import ResponseSet


@runtime_checkable
class Context(Protocol):
    """Anything that can answer a Request with a ResponseSet."""

    def query(self, request: Request) -> ResponseSet:
        """Run the request and return its time series."""
        ...
