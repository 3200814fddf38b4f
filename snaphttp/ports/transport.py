"""Transport port: contract for opening one HTTP exchange.

The request service depends on this port; infrastructure (e.g. httpx)
implements it. Tests substitute fakes through the same contract.
"""
from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Mapping,
    Protocol,
    Sequence,
    runtime_checkable,
)

if TYPE_CHECKING:
    from snaphttp.domain.models import RequestDescriptor


class TransportError(Exception):
    """Base for transport failures (connection, DNS, TLS, read errors)."""


class TransportTimeoutError(TransportError):
    """Raised when the request exceeds the descriptor's timeout."""


@runtime_checkable
class TransportResponse(Protocol):
    """Response head plus the raw (still encoded) body stream."""

    @property
    def status_code(self) -> int: ...

    @property
    def status_message(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]:
        """Header names are lower-cased."""
        ...

    @property
    def raw_headers(self) -> Sequence[tuple[str, str]]: ...

    @property
    def http_version(self) -> str: ...

    @property
    def trailers(self) -> Mapping[str, str]: ...

    @property
    def raw_trailers(self) -> Sequence[tuple[str, str]]: ...

    @property
    def connection(self) -> Any: ...

    def aiter_raw(self) -> AsyncIterator[bytes]:
        """Yield body chunks in arrival order; raise TransportError on read failure."""
        ...


ResponseHandler = Callable[[TransportResponse], Awaitable[None]]
ErrorListener = Callable[[BaseException], None]


@runtime_checkable
class RequestHandle(Protocol):
    """An opened request whose body is still being written."""

    def on_error(self, listener: ErrorListener) -> None:
        """Register a listener for request-level errors."""
        ...

    def write(self, data: bytes) -> None: ...

    def end(self) -> None:
        """Finish the body and send the request. No write may follow."""
        ...

    def abort(self) -> None:
        """Drop the request. Listeners are not notified."""
        ...


@runtime_checkable
class Transport(Protocol):
    """Port: open a request for a resolved descriptor."""

    def open(self, descriptor: RequestDescriptor, on_response: ResponseHandler) -> RequestHandle:
        """Return a handle; on_response is awaited once the response head arrives."""
        ...
