"""Transport factory: selects implementation from config. Only place that imports concrete transports."""
from __future__ import annotations

from snaphttp.config.settings import Settings
from snaphttp.constants import TRANSPORT_BACKEND
from snaphttp.infrastructure.http.httpx_transport import HttpxTransport
from snaphttp.ports.transport import Transport


def create_transport(settings: Settings, *, secure: bool) -> Transport:
    backend = settings.transport_backend.strip().lower()

    if backend == TRANSPORT_BACKEND.HTTPX:
        return HttpxTransport(
            secure=secure,
            tls_verify=settings.tls_verify,
            user_agent=settings.user_agent,
        )

    raise ValueError(f"Unsupported transport backend: {backend}")
