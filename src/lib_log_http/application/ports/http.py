"""Port describing the HTTP collaborator that performs network I/O."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from lib_log_http.domain.request import OutgoingRequest


@runtime_checkable
class HttpTransportPort(Protocol):
    """Send fully formed requests to the remote endpoint."""

    async def send(self, request: OutgoingRequest) -> Any:
        """Issue ``request``; return the response or raise on transport failure."""

    async def aclose(self) -> None:
        """Release pooled connections."""


__all__ = ["HttpTransportPort"]
