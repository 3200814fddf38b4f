"""Concrete Transport implementation using httpx (injected where Transport is needed).

Each opened request gets its own AsyncClient, closed once the response stream
has been consumed, so concurrent calls share no connection state.
"""
from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator

import httpx
from loguru import logger

from snaphttp.constants import LIBRARY_NAME, SCHEME
from snaphttp.domain.models import RequestDescriptor
from snaphttp.ports.transport import (
    ErrorListener,
    RequestHandle,
    ResponseHandler,
    Transport,
    TransportError,
    TransportTimeoutError,
)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=LIBRARY_NAME, event=event, **kwargs).info("")


def _map_error(exc: Exception, url: str) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        error: TransportError = TransportTimeoutError(f"timeout while requesting {url}")
    else:
        error = TransportError(f"request failed for {url}: {exc}")
    error.__cause__ = exc
    return error


class _HttpxResponseAdapter:
    """Adapts a streamed httpx.Response to the TransportResponse protocol."""

    def __init__(self, response: httpx.Response, url: str) -> None:
        self._response = response
        self._url = url

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def status_message(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._response.headers)

    @property
    def raw_headers(self) -> list[tuple[str, str]]:
        return [
            (name.decode("latin-1"), value.decode("latin-1"))
            for name, value in self._response.headers.raw
        ]

    @property
    def http_version(self) -> str:
        return self._response.http_version.removeprefix("HTTP/")

    @property
    def trailers(self) -> dict[str, str]:
        # httpx does not surface trailers.
        return {}

    @property
    def raw_trailers(self) -> list[tuple[str, str]]:
        return []

    @property
    def connection(self) -> Any:
        return self._response.extensions.get("network_stream")

    async def aiter_raw(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_raw():
                yield chunk
        except httpx.HTTPError as exc:
            raise _map_error(exc, self._url) from exc


class HttpxRequestHandle(RequestHandle):
    """Buffers the request body; end() sends the request on the running loop."""

    def __init__(
        self,
        transport: HttpxTransport,
        descriptor: RequestDescriptor,
        on_response: ResponseHandler,
    ) -> None:
        self._transport = transport
        self._descriptor = descriptor
        self._on_response = on_response
        self._listeners: list[ErrorListener] = []
        self._chunks: list[bytes] = []
        self._ended = False
        self._aborted = False
        self._task: asyncio.Task[None] | None = None

    def on_error(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)

    def write(self, data: bytes) -> None:
        if self._ended or self._aborted:
            raise RuntimeError("write after end")
        self._chunks.append(bytes(data))

    def end(self) -> None:
        if self._ended or self._aborted:
            return
        self._ended = True
        self._task = self._transport.spawn(self._send())

    def abort(self) -> None:
        self._aborted = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _send(self) -> None:
        descriptor = self._descriptor
        url = self._transport.url_for(descriptor)
        body = b"".join(self._chunks) if self._chunks else None
        try:
            async with self._transport.create_client(descriptor) as client:
                request = self._transport.build_request(client, descriptor, url, body)
                response = await client.send(
                    request,
                    auth=self._transport.auth_for(descriptor),
                    follow_redirects=False,
                    stream=True,
                )
                _log(
                    "transport_request_sent",
                    url=url,
                    method=descriptor.method,
                    status_code=response.status_code,
                )
                try:
                    await self._on_response(_HttpxResponseAdapter(response, url))
                finally:
                    await response.aclose()
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            self._emit_error(_map_error(exc, url))
        except Exception as exc:
            # Building or sending failed outside httpx (e.g. unencodable header value).
            logger.warning("unexpected transport failure for {}: {}", url, exc)
            self._emit_error(_map_error(exc, url))

    def _emit_error(self, error: TransportError) -> None:
        _log("transport_error", error=str(error), error_type=type(error).__name__)
        for listener in list(self._listeners):
            listener(error)


class HttpxTransport(Transport):
    """Transport implementation using httpx.AsyncClient.

    mock_transport replaces the network layer (httpx.MockTransport in tests);
    socket_path and local_address are only honoured without it.
    """

    def __init__(
        self,
        *,
        secure: bool,
        tls_verify: bool = True,
        user_agent: str = "",
        mock_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secure = secure
        self._tls_verify = tls_verify
        self._user_agent = user_agent
        self._mock_transport = mock_transport
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def secure(self) -> bool:
        return self._secure

    def open(self, descriptor: RequestDescriptor, on_response: ResponseHandler) -> HttpxRequestHandle:
        return HttpxRequestHandle(self, descriptor, on_response)

    def spawn(self, coro: Any) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def url_for(self, descriptor: RequestDescriptor) -> str:
        scheme = SCHEME.HTTPS if self._secure else SCHEME.HTTP
        host = descriptor.hostname or "localhost"
        if ":" in host:
            host = f"[{host}]"
        return f"{scheme}://{host}:{descriptor.port}{descriptor.path}"

    def auth_for(self, descriptor: RequestDescriptor) -> httpx.BasicAuth | None:
        if not descriptor.auth:
            return None
        username, _, password = descriptor.auth.partition(":")
        return httpx.BasicAuth(username, password)

    def create_client(self, descriptor: RequestDescriptor) -> httpx.AsyncClient:
        transport = self._mock_transport
        if transport is None:
            transport = httpx.AsyncHTTPTransport(
                verify=self._tls_verify,
                uds=descriptor.socket_path,
                local_address=descriptor.local_address,
            )
        return httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(descriptor.timeout_seconds),
            follow_redirects=False,
            trust_env=False,
        )

    def build_request(
        self,
        client: httpx.AsyncClient,
        descriptor: RequestDescriptor,
        url: str,
        body: bytes | None,
    ) -> httpx.Request:
        headers = {name: str(value) for name, value in descriptor.headers.items()}
        request = client.build_request(descriptor.method, url, headers=headers, content=body)
        # Only ask for compressed bodies when the caller did.
        if descriptor.header("accept-encoding") is None:
            request.headers.pop("accept-encoding", None)
        if self._user_agent and descriptor.header("user-agent") is None:
            request.headers["user-agent"] = self._user_agent
        return request
