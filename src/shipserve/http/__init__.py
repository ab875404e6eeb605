"""
HTTP protocol layer: request parsing, response serialization, routing.
"""

from .request import (
    HTTPRequest,
    HTTPParseError,
    MalformedRequestLine,
    Method,
    ParsePhase,
    RequestParser,
    Version,
    parse_request,
)
from .response import (
    HTTPResponse,
    MissingBodyError,
    ResponseBuilder,
    internal_error,
    not_found,
    ok,
)
from .status_codes import HTTPStatus, status_text
from .mime_types import get_mime_type
from .router import HandlerKind, Router

__all__ = [
    # Request
    "HTTPRequest",
    "HTTPParseError",
    "MalformedRequestLine",
    "Method",
    "ParsePhase",
    "RequestParser",
    "Version",
    "parse_request",
    # Response
    "HTTPResponse",
    "MissingBodyError",
    "ResponseBuilder",
    "internal_error",
    "not_found",
    "ok",
    # Status codes
    "HTTPStatus",
    "status_text",
    # MIME types
    "get_mime_type",
    # Router
    "HandlerKind",
    "Router",
]
