"""snaphttp - single-call HTTP/HTTPS requests with fully buffered responses."""
from loguru import logger

from snaphttp.application.request_service import (
    request,
    request_async,
    request_future,
    request_sync,
)
from snaphttp.constants import LIBRARY_NAME
from snaphttp.domain.errors import (
    DecompressionError,
    ProtocolError,
    SnapHttpError,
    UsageError,
)
from snaphttp.domain.models import RequestDescriptor, RequestOptions, ResponseEnvelope
from snaphttp.ports.transport import (
    RequestHandle,
    Transport,
    TransportError,
    TransportResponse,
    TransportTimeoutError,
)

# Library logging is off until the application calls logger.enable("snaphttp").
logger.disable(LIBRARY_NAME)

__version__ = "0.1.0"

__all__ = [
    "DecompressionError",
    "ProtocolError",
    "RequestDescriptor",
    "RequestHandle",
    "RequestOptions",
    "ResponseEnvelope",
    "SnapHttpError",
    "Transport",
    "TransportError",
    "TransportResponse",
    "TransportTimeoutError",
    "UsageError",
    "request",
    "request_async",
    "request_future",
    "request_sync",
]
