"""Response aggregator: buffers a (possibly compressed) response stream into one body.

The envelope is built only after the stream ends, so callers never see a
partial body.
"""
from __future__ import annotations

import zlib
from typing import Any

from snaphttp.constants import CONTENT_ENCODING
from snaphttp.domain.errors import DecompressionError
from snaphttp.domain.models import ResponseEnvelope
from snaphttp.ports.transport import TransportResponse

_GZIP_WBITS = 16 + zlib.MAX_WBITS


def create_decompressor(content_encoding: str | None) -> Any:
    """Return a zlib decompressor for gzip/deflate, None for anything else."""
    if content_encoding == CONTENT_ENCODING.GZIP:
        return zlib.decompressobj(_GZIP_WBITS)
    if content_encoding == CONTENT_ENCODING.DEFLATE:
        return zlib.decompressobj()
    return None


class ResponseAggregator:
    """Consumes one TransportResponse and produces its ResponseEnvelope."""

    def __init__(self, *, compressed: bool) -> None:
        self._compressed = compressed

    async def aggregate(self, response: TransportResponse) -> ResponseEnvelope:
        decompressor = None
        if self._compressed:
            decompressor = create_decompressor(response.headers.get("content-encoding"))

        body = bytearray()
        try:
            async for chunk in response.aiter_raw():
                body += decompressor.decompress(chunk) if decompressor else chunk
            if decompressor is not None:
                body += decompressor.flush()
        except zlib.error as exc:
            raise DecompressionError(f"cannot decode response body: {exc}") from exc

        return ResponseEnvelope(
            status_code=int(response.status_code),
            status_message=response.status_message,
            headers=dict(response.headers),
            raw_headers=list(response.raw_headers),
            http_version=response.http_version,
            trailers=dict(response.trailers),
            raw_trailers=list(response.raw_trailers),
            connection=response.connection,
            body=bytes(body),
        )
