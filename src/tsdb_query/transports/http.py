"""HTTP transport for the OpenTSDB v2 query API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tsdb_query.errors import RemoteError, TransportError, TSDBError
from tsdb_query.query import Request
from tsdb_query.types import Response, ResponseSet

logger = logging.getLogger("tsdb_query")


class Host:
    """Sends each Request as one JSON POST to ``<scheme>://<host><path>``.

    ``host`` is of the form hostname:port.
    """

    def __init__(
        self,
        host: str,
        *,
        scheme: str = "http",
        path: str = "/api/query",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self._path = path
        self._client = httpx.Client(
            base_url=f"{scheme}://{host}",
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    def query(self, request: Request) -> ResponseSet:
        """Run the request. Can raise RemoteError."""
        body = request.to_json()
        logger.debug("tsdb: POST %s%s %s", self.host, self._path, body)
        try:
            response = self._client.post(self._path, content=body)
        except httpx.HTTPError as e:
            raise TransportError(f"tsdb: {e}") from e

        if not response.is_success:
            raise _decode_error(body, response)

        try:
            data = response.json()
            return [Response.from_wire(item) for item in data]
        except (ValueError, TypeError, KeyError) as e:
            raise TransportError(f"tsdb: bad response: {e}") from e

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> Host:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _decode_error(body: str, response: httpx.Response) -> TSDBError:
    """Build the error for a non-success response."""
    try:
        data: Any = response.json()
    except ValueError:
        data = None
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict):
        return RemoteError(
            request=body,
            code=int(err.get("code", response.status_code)),
            message=str(err.get("message", "")),
            details=str(err.get("details", "")),
        )
    return TransportError(f"tsdb: {response.text}")
