"""Option resolver: turns a URL or options value into a RequestDescriptor.

URL-derived values are the defaults; every option the caller supplied replaces
the matching default (shallow merge). Nothing here performs I/O, so every
failure is a synchronous UsageError.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union
from urllib.parse import SplitResult, unquote, urlsplit

from pydantic import ValidationError

from snaphttp.constants import (
    COMPRESSED_ACCEPT_ENCODING,
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    DEFAULT_METHOD,
    DEFAULT_PATH,
    SCHEME,
)
from snaphttp.domain.errors import UsageError
from snaphttp.domain.models import RequestDescriptor, RequestOptions

MISSING_URL_MESSAGE = "Missing url option from options for request method."

OptionsInput = Union[str, Mapping[str, Any], RequestOptions]


class _NoPayload:
    def __repr__(self) -> str:
        return "NO_PAYLOAD"


NO_PAYLOAD: Any = _NoPayload()

# Option name -> descriptor field, for options that override resolver defaults.
_DESCRIPTOR_FIELDS = {
    "protocol": "scheme",
    "hostname": "hostname",
    "port": "port",
    "path": "path",
    "method": "method",
    "headers": "headers",
    "auth": "auth",
    "socket_path": "socket_path",
    "local_address": "local_address",
    "timeout": "timeout",
    "compressed": "compressed",
}


@dataclass(frozen=True)
class ResolvedRequest:
    descriptor: RequestDescriptor
    payload: Any = NO_PAYLOAD

    @property
    def has_payload(self) -> bool:
        return self.payload is not NO_PAYLOAD


def normalize_scheme(value: str | None) -> str:
    """'HTTPS:', 'https' and 'https://' all become 'https'."""
    return (value or "").strip().lower().rstrip("/").rstrip(":")


def default_port(scheme: str) -> int:
    return DEFAULT_HTTP_PORT if normalize_scheme(scheme) == SCHEME.HTTP else DEFAULT_HTTPS_PORT


def _parse_options(options: object) -> RequestOptions | None:
    if isinstance(options, str):
        return None
    if isinstance(options, RequestOptions):
        return options
    if not isinstance(options, Mapping) or "url" not in options:
        raise UsageError(MISSING_URL_MESSAGE)
    try:
        return RequestOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise UsageError(f"Invalid request options: {exc}") from exc


def _split_url(url: str) -> tuple[SplitResult, int | None]:
    try:
        parts = urlsplit(url)
        return parts, parts.port
    except ValueError as exc:
        raise UsageError(f"Invalid url {url!r}: {exc}") from exc


def _path_of(parts: SplitResult) -> str:
    path = parts.path or DEFAULT_PATH
    if parts.query:
        path = f"{path}?{parts.query}"
    return path


def _auth_of(parts: SplitResult) -> str | None:
    if parts.username is None:
        return None
    username = unquote(parts.username)
    if parts.password is None:
        return username
    return f"{username}:{unquote(parts.password)}"


def _force_accept_encoding(headers: dict[str, Any]) -> dict[str, Any]:
    forced = {k: v for k, v in headers.items() if k.lower() != "accept-encoding"}
    forced["accept-encoding"] = COMPRESSED_ACCEPT_ENCODING
    return forced


def resolve_request(options: OptionsInput) -> ResolvedRequest:
    """Build a fresh descriptor (and extract the payload) for one call.

    Raises UsageError when a structured input has no url or carries invalid values.
    """
    parsed = _parse_options(options)
    url = options if parsed is None else parsed.url
    parts, url_port = _split_url(url)  # type: ignore[arg-type]
    scheme = normalize_scheme(parts.scheme)

    fields: dict[str, Any] = {
        "scheme": scheme,
        "hostname": parts.hostname or "",
        "port": url_port if url_port is not None else default_port(scheme),
        "path": _path_of(parts),
        "method": DEFAULT_METHOD,
        "headers": {},
        "auth": _auth_of(parts),
    }

    payload: Any = NO_PAYLOAD
    if parsed is not None:
        supplied = parsed.supplied()
        if "data" in supplied:
            payload = supplied.pop("data")
        for name, value in supplied.items():
            target = _DESCRIPTOR_FIELDS.get(name)
            if target is not None:
                fields[target] = value

    fields["scheme"] = normalize_scheme(fields["scheme"])
    fields["method"] = str(fields["method"]).upper()
    fields["headers"] = dict(fields["headers"])
    try:
        fields["port"] = int(fields["port"])
    except (TypeError, ValueError) as exc:
        raise UsageError(f"Invalid port {fields['port']!r}") from exc

    if fields.get("compressed"):
        fields["headers"] = _force_accept_encoding(fields["headers"])

    return ResolvedRequest(descriptor=RequestDescriptor(**fields), payload=payload)
