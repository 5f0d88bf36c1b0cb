"""Error types raised by service clients and the client pool.

The datasource never wraps these; a failed client call on the query path
reaches the caller as the client raised it.
"""

from __future__ import annotations

from typing import Optional


class ServiceClientError(Exception):
    """A per-service API call failed (transport, HTTP status or API error)."""

    def __init__(
        self,
        service: str,
        code: str,
        message: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.service = service
        self.code = code
        self.message = message or code
        self.request_id = request_id
        super().__init__(f"[{service}] {code}: {self.message}")


class ClientKeyCollisionError(ValueError):
    """Two registered services derived the same client key."""

    def __init__(self, key: str, first: str, second: str) -> None:
        self.key = key
        super().__init__(
            f"client key {key!r} derived for both {first!r} and {second!r}"
        )
