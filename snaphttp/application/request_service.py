"""Request service: runs one call from options to a single delivered outcome.

resolve -> select transport -> open -> write body -> end -> aggregate -> complete.
Only input validation raises; every later failure goes through the callback.
"""
from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from snaphttp.application.transport_selector import select_transport
from snaphttp.constants import LIBRARY_NAME
from snaphttp.domain.body_encoder import encode_body
from snaphttp.domain.completion import Callback, Completion
from snaphttp.domain.errors import ProtocolError, UsageError
from snaphttp.domain.models import RequestDescriptor, ResponseEnvelope
from snaphttp.domain.option_resolver import OptionsInput, resolve_request
from snaphttp.domain.response_aggregator import ResponseAggregator
from snaphttp.ports.transport import Transport, TransportResponse


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=LIBRARY_NAME, event=event, **kwargs).info("")


def _require_running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as exc:
        raise UsageError(
            "request() needs a running event loop; use request_sync() from synchronous code"
        ) from exc


def _describe(descriptor: RequestDescriptor) -> str:
    return f"{descriptor.scheme}://{descriptor.hostname}:{descriptor.port}{descriptor.path}"


def request(
    options: OptionsInput,
    callback: Callback | None = None,
    transport: Transport | None = None,
) -> asyncio.Future[ResponseEnvelope] | None:
    """Send one request and deliver the buffered response.

    With a callback, it is called exactly once as callback(error, None) or
    callback(None, response) and None is returned. Without one, the awaitable
    from request_future() is returned. transport replaces the plain-HTTP
    transport only.

    Raises UsageError synchronously for invalid input; nothing else is raised.
    """
    if callback is None:
        return request_future(options, transport)

    resolved = resolve_request(options)
    _require_running_loop()
    descriptor = resolved.descriptor
    url = _describe(descriptor)
    completion = Completion(callback, url=url)
    _log(
        "request_started",
        url=url,
        method=descriptor.method,
        compressed=descriptor.compressed,
        has_payload=resolved.has_payload,
    )

    try:
        selected = select_transport(descriptor.scheme, override=transport)
    except ProtocolError as exc:
        _log("request_rejected", url=url, scheme=descriptor.scheme)
        completion.fail(exc)
        return None

    aggregator = ResponseAggregator(compressed=descriptor.compressed)

    async def on_response(response: TransportResponse) -> None:
        try:
            envelope = await aggregator.aggregate(response)
        except Exception as exc:
            completion.fail(exc)
            return
        completion.succeed(envelope)

    handle = selected.open(descriptor, on_response)
    handle.on_error(completion.fail)

    if resolved.has_payload:
        try:
            body = encode_body(resolved.payload, descriptor.headers)
        except UsageError as exc:
            # The request was opened but nothing was sent; drop it.
            handle.abort()
            completion.fail(exc)
            return None
        handle.write(body)
    handle.end()
    return None


def request_future(
    options: OptionsInput,
    transport: Transport | None = None,
) -> asyncio.Future[ResponseEnvelope]:
    """Awaitable form of request(), built by wrapping the callback form once.

    Cancelling the returned future does not stop the request.
    """
    loop = _require_running_loop()
    future: asyncio.Future[ResponseEnvelope] = loop.create_future()

    def settle(error: BaseException | None, response: ResponseEnvelope | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(response)  # type: ignore[arg-type]

    request(options, settle, transport)
    return future


async def request_async(options: OptionsInput, transport: Transport | None = None) -> ResponseEnvelope:
    return await request_future(options, transport)


def request_sync(options: OptionsInput, transport: Transport | None = None) -> ResponseEnvelope:
    """Blocking form for code that is not running an event loop."""
    return asyncio.run(request_async(options, transport))
