"""Transport selector: picks the transport for a resolved scheme."""
from __future__ import annotations

from snaphttp.composition import DefaultTransports, get_default_transports
from snaphttp.constants import SCHEME
from snaphttp.domain.errors import ProtocolError
from snaphttp.domain.option_resolver import normalize_scheme
from snaphttp.ports.transport import Transport

UNKNOWN_PROTOCOL_MESSAGE = "Invalid / unknown address protocol. Expected HTTP or HTTPS."


def select_transport(
    scheme: str,
    *,
    override: Transport | None = None,
    defaults: DefaultTransports | None = None,
) -> Transport:
    """Return the transport for scheme.

    override replaces only the plain-HTTP transport; https always goes through
    the default secure transport. Raises ProtocolError for any other scheme.
    """
    normalized = normalize_scheme(scheme)
    if normalized == SCHEME.HTTP:
        if override is not None:
            return override
        return (defaults or get_default_transports()).http
    if normalized == SCHEME.HTTPS:
        return (defaults or get_default_transports()).https
    raise ProtocolError(UNKNOWN_PROTOCOL_MESSAGE)
