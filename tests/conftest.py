from __future__ import annotations

import asyncio
from typing import Any

import pytest

from snaphttp.composition import DefaultTransports
from snaphttp.domain.models import RequestDescriptor, ResponseEnvelope


class FakeResponse:
    """Implements TransportResponse; yields the given chunks, then optionally fails."""

    def __init__(
        self,
        chunks: list[bytes] | None = None,
        *,
        status_code: int = 200,
        status_message: str = "OK",
        headers: dict[str, str] | None = None,
        raw_headers: list[tuple[str, str]] | None = None,
        http_version: str = "1.1",
        fail_with: Exception | None = None,
    ) -> None:
        self.chunks = list(chunks or [])
        self.status_code = status_code
        self.status_message = status_message
        self.headers = headers or {}
        self.raw_headers = raw_headers or [(k, v) for k, v in self.headers.items()]
        self.http_version = http_version
        self.trailers: dict[str, str] = {}
        self.raw_trailers: list[tuple[str, str]] = []
        self.connection = object()
        self._fail_with = fail_with

    async def aiter_raw(self):
        for chunk in self.chunks:
            await asyncio.sleep(0)
            yield chunk
        if self._fail_with is not None:
            raise self._fail_with


class FakeRequestHandle:
    """Implements RequestHandle; records what the request service did with it."""

    def __init__(self, transport: "FakeTransport", descriptor: RequestDescriptor, on_response) -> None:  # noqa: ANN001
        self._transport = transport
        self.descriptor = descriptor
        self._on_response = on_response
        self.listeners: list[Any] = []
        self.written: list[bytes] = []
        self.ended = False
        self.aborted = False

    @property
    def body(self) -> bytes:
        return b"".join(self.written)

    def on_error(self, listener) -> None:  # noqa: ANN001
        self.listeners.append(listener)

    def write(self, data: bytes) -> None:
        self.written.append(data)

    def end(self) -> None:
        self.ended = True
        self._transport.tasks.append(asyncio.get_running_loop().create_task(self._run()))

    def abort(self) -> None:
        self.aborted = True

    async def _run(self) -> None:
        await asyncio.sleep(0)
        if self._transport.error is not None:
            for listener in self.listeners:
                listener(self._transport.error)
            return
        await self._on_response(self._transport.response)


class FakeTransport:
    """Implements Transport; replies with a canned response or a canned error."""

    def __init__(
        self,
        response: FakeResponse | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.response = response or FakeResponse([b"ok"])
        self.error = error
        self.handles: list[FakeRequestHandle] = []
        self.tasks: list[asyncio.Task[None]] = []

    @property
    def opened(self) -> bool:
        return bool(self.handles)

    @property
    def last(self) -> FakeRequestHandle:
        return self.handles[-1]

    def open(self, descriptor: RequestDescriptor, on_response) -> FakeRequestHandle:  # noqa: ANN001
        handle = FakeRequestHandle(self, descriptor, on_response)
        self.handles.append(handle)
        return handle

    async def drain(self) -> None:
        if self.tasks:
            await asyncio.gather(*self.tasks)


class CapturingCallback:
    """Callback that records every (error, response) delivery."""

    def __init__(self) -> None:
        self.calls: list[tuple[BaseException | None, ResponseEnvelope | None]] = []
        self._event = asyncio.Event()

    def __call__(self, error: BaseException | None, response: ResponseEnvelope | None) -> None:
        self.calls.append((error, response))
        self._event.set()

    async def wait(self, timeout: float = 2.0) -> None:
        await asyncio.wait_for(self._event.wait(), timeout)

    @property
    def error(self) -> BaseException | None:
        return self.calls[0][0]

    @property
    def response(self) -> ResponseEnvelope | None:
        return self.calls[0][1]


@pytest.fixture()
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def fake_https(monkeypatch: pytest.MonkeyPatch) -> FakeTransport:
    """Replaces the default secure transport so https calls stay off the network."""
    https = FakeTransport(FakeResponse([b"secure"]))
    defaults = DefaultTransports(http=FakeTransport(FakeResponse([b"default-http"])), https=https)
    monkeypatch.setattr(
        "snaphttp.application.transport_selector.get_default_transports",
        lambda: defaults,
    )
    return https
