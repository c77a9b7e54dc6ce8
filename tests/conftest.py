"""Shared pytest fixtures."""

from datetime import datetime, timezone

import pytest

from tsdb_query import Request, Response, ResponseSet, TagSet


class FakeContext:
    """In-memory transport that records every request it answers."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[Request] = []
        self.error = error

    def query(self, request: Request) -> ResponseSet:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return [
            Response(
                metric=q.metric,
                tags=TagSet(q.tags),
                dps={"1700000000": float(len(self.calls))},
            )
            for q in request.queries
        ]


@pytest.fixture
def transport() -> FakeContext:
    """Create a fresh FakeContext for each test."""
    return FakeContext()


@pytest.fixture
def reference() -> datetime:
    """A fixed reference instant."""
    return datetime(2023, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
