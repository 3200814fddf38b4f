"""Library-level constants shared across modules."""
from __future__ import annotations

LIBRARY_NAME = "snaphttp"

DEFAULT_METHOD = "GET"
DEFAULT_PATH = "/"
DEFAULT_HTTP_PORT = 80
DEFAULT_HTTPS_PORT = 443

COMPRESSED_ACCEPT_ENCODING = "gzip, deflate"


class SCHEME:
    HTTP = "http"
    HTTPS = "https"


class CONTENT_TYPE:
    JSON = "application/json"
    FORM = "x/www-url-form-encoded"


class CONTENT_ENCODING:
    GZIP = "gzip"
    DEFLATE = "deflate"


class TRANSPORT_BACKEND:
    HTTPX = "httpx"
