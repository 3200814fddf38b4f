"""Unit tests for exactly-once outcome delivery."""
from __future__ import annotations

from snaphttp.domain.completion import Completion
from snaphttp.domain.models import ResponseEnvelope
from tests.conftest import CapturingCallback


def _envelope(body: bytes = b"ok") -> ResponseEnvelope:
    return ResponseEnvelope(
        status_code=200,
        status_message="OK",
        headers={},
        raw_headers=[],
        http_version="1.1",
        trailers={},
        raw_trailers=[],
        connection=None,
        body=body,
    )


def test_success_is_delivered_once():
    cb = CapturingCallback()
    completion = Completion(cb, url="http://example.com:80/")
    envelope = _envelope()

    completion.succeed(envelope)

    assert cb.calls == [(None, envelope)]
    assert completion.delivered is True


def test_error_is_delivered_once():
    cb = CapturingCallback()
    completion = Completion(cb)
    error = RuntimeError("boom")

    completion.fail(error)

    assert cb.calls == [(error, None)]


def test_later_outcomes_are_dropped():
    cb = CapturingCallback()
    completion = Completion(cb)
    first = RuntimeError("first")

    completion.fail(first)
    completion.succeed(_envelope())
    completion.fail(RuntimeError("second"))

    assert cb.calls == [(first, None)]


def test_error_after_success_is_dropped():
    cb = CapturingCallback()
    completion = Completion(cb)
    envelope = _envelope()

    completion.succeed(envelope)
    completion.fail(RuntimeError("late close failure"))

    assert cb.calls == [(None, envelope)]
