"""Body encoder: converts a call payload into request body bytes."""
from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import quote, urlencode

from snaphttp.constants import CONTENT_TYPE
from snaphttp.domain.errors import UsageError

RAW_BODY_TYPES = (bytes, bytearray, memoryview)

UNSUPPORTED_CONTENT_TYPE_MESSAGE = (
    'data was passed in as an object, but the "Content-Type" (or "content-type") header '
    f'was not "{CONTENT_TYPE.JSON}" or "{CONTENT_TYPE.FORM}".'
)


def declared_content_type(headers: Mapping[str, Any]) -> Any:
    """Only the two exact spellings are honoured, 'Content-Type' first."""
    return headers.get("Content-Type") or headers.get("content-type")


def _form_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _form_encode(payload: Any) -> str:
    if not isinstance(payload, Mapping):
        raise UsageError(f"cannot form-encode data of type {type(payload).__name__}")
    pairs: list[tuple[str, str]] = []
    for key, value in payload.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), _form_value(item)) for item in value)
        else:
            pairs.append((str(key), _form_value(value)))
    return urlencode(pairs, safe="!'()*", quote_via=quote)


def _json_encode(payload: Any) -> str:
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise UsageError(f"cannot JSON-encode data: {exc}") from exc


def encode_body(payload: Any, headers: Mapping[str, Any]) -> bytes:
    """Return the bytes to write for payload.

    Raw bytes pass through and text is sent as UTF-8. Any other value is
    serialized according to the declared content type; UsageError if there is
    no supported declaration or the value cannot be serialized.
    """
    if isinstance(payload, RAW_BODY_TYPES):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")

    content_type = declared_content_type(headers)
    if content_type == CONTENT_TYPE.JSON:
        return _json_encode(payload).encode("utf-8")
    if content_type == CONTENT_TYPE.FORM:
        return _form_encode(payload).encode("utf-8")
    raise UsageError(UNSUPPORTED_CONTENT_TYPE_MESSAGE)
