"""Completion channel: delivers exactly one outcome per call."""
from __future__ import annotations

from typing import Any, Callable, Optional

from loguru import logger

from snaphttp.constants import LIBRARY_NAME
from snaphttp.domain.models import ResponseEnvelope

Callback = Callable[[Optional[BaseException], Optional[ResponseEnvelope]], None]


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=LIBRARY_NAME, event=event, **kwargs).info("")


class Completion:
    """Wraps the caller's callback; the first outcome wins, later ones are dropped."""

    def __init__(self, callback: Callback, *, url: str = "") -> None:
        self._callback = callback
        self._url = url
        self._delivered = False

    @property
    def delivered(self) -> bool:
        return self._delivered

    def fail(self, error: BaseException) -> None:
        if self._claim("error", error=repr(error)):
            _log("request_failed", url=self._url, error=str(error), error_type=type(error).__name__)
            self._callback(error, None)

    def succeed(self, response: ResponseEnvelope) -> None:
        if self._claim("response", status_code=response.status_code):
            _log(
                "request_completed",
                url=self._url,
                status_code=response.status_code,
                body_length=len(response.body),
            )
            self._callback(None, response)

    def _claim(self, outcome: str, **kwargs: Any) -> bool:
        if self._delivered:
            logger.warning("dropping duplicate {} for {}: {}", outcome, self._url, kwargs)
            return False
        self._delivered = True
        return True
