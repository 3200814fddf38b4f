"""Composition root: builds the production transports from settings.

Composition may: import concrete factories, store interface types. Transports
hold configuration only, so one pair per process is shared by every call.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from snaphttp.config.settings import Settings
from snaphttp.infrastructure.http.factory import create_transport
from snaphttp.ports.transport import Transport


@dataclass(frozen=True)
class DefaultTransports:
    http: Transport
    https: Transport


def create_default_transports(settings: Settings | None = None) -> DefaultTransports:
    settings = settings or Settings()
    return DefaultTransports(
        http=create_transport(settings, secure=False),
        https=create_transport(settings, secure=True),
    )


@lru_cache(maxsize=1)
def get_default_transports() -> DefaultTransports:
    return create_default_transports()
