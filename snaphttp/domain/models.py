"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RequestOptions(BaseModel):
    """Structured call input. Only fields the caller actually set override resolver defaults."""

    model_config = ConfigDict(extra="ignore")

    url: str
    compressed: bool = False
    protocol: str | None = None
    hostname: str | None = None
    port: int | None = None
    local_address: str | None = Field(None, validation_alias=AliasChoices("local_address", "localAddress"))
    socket_path: str | None = Field(None, validation_alias=AliasChoices("socket_path", "socketPath"))
    method: str | None = None
    path: str | None = None
    headers: dict[str, Any] | None = None
    auth: str | None = None
    # Milliseconds.
    timeout: float | None = None
    data: Any = None

    def supplied(self) -> dict[str, Any]:
        """Fields the caller set, excluding explicit None (data keeps None: it is a payload)."""
        values: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name != "data":
                continue
            values[name] = value
        return values


@dataclass(frozen=True)
class RequestDescriptor:
    """Resolved parameters for one request (value object)."""

    scheme: str
    hostname: str
    port: int
    path: str
    method: str
    headers: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    auth: str | None = None
    socket_path: str | None = None
    local_address: str | None = None
    timeout: float | None = None
    compressed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or isinstance(self.port, bool):
            raise TypeError("descriptor.port must be an int")
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def timeout_seconds(self) -> float | None:
        # 0 means no timeout.
        if not self.timeout:
            return None
        return self.timeout / 1000.0

    def header(self, name: str) -> Any:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class ResponseEnvelope:
    """Finalized response: transport-provided fields plus the complete body."""

    status_code: int
    status_message: str
    headers: Mapping[str, str]
    raw_headers: Sequence[tuple[str, str]]
    http_version: str
    trailers: Mapping[str, str]
    raw_trailers: Sequence[tuple[str, str]]
    connection: Any
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
