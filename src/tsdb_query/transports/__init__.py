"""Query transports for tsdb_query."""

from tsdb_query.transports.base import Context
from tsdb_query.transports.http import Host

__all__ = [
    "Context",
    "Host",
]
