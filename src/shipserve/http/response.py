"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

An HTTPResponse holds the status code, headers and body a handler wants to
send. Serialization turns it into the exact bytes written to the socket.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\\r\\n                  ← {version} {code} {status_text}
    Content-Type: text/html\\r\\n          ← one line per header
    Content-Length: 13\\r\\n               ← always computed, never stored
    \\r\\n                                 ← blank line
    <h1>Hi!</h1>                         ← body

Content-Length is the UTF-8 byte length of the body at serialization time.
Because it is never stored on the object, it cannot drift out of sync with a
body that was changed after construction.

=============================================================================
DEFAULT HEADERS
=============================================================================

    HTTPResponse("200")                          → {"Content-Type": "text/html"}
    HTTPResponse("200", {"X-A": "1"})            → {"X-A": "1"}       (verbatim)
    HTTPResponse("200", {})                      → {}                 (verbatim)

Caller headers are never merged with the default. Passing None is the only
way to get the default Content-Type.

=============================================================================
BODY IS REQUIRED
=============================================================================

Every handler in this server answers with a body, using "" at minimum. A
response whose body is None cannot be serialized: to_bytes() raises
MissingBodyError. That is a bug in the handler, not a client error, so the
dispatcher does not try to recover from it.

=============================================================================
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .status_codes import HTTPStatus, status_text


DEFAULT_VERSION = "HTTP/1.1"
DEFAULT_CONTENT_TYPE = "text/html"


def default_headers() -> Dict[str, str]:
    """The header set used when a response is created without headers."""
    return {"Content-Type": DEFAULT_CONTENT_TYPE}


class MissingBodyError(RuntimeError):
    """Raised when serializing a response that has no body."""


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response.

    Attributes:
        status_code: Status code as sent on the wire, e.g. "404".
        headers: Header name → value. None means the default header set.
        body: Response body text. Must be set before serialization.
        version: HTTP version for the status line.
    """

    status_code: str = "200"
    headers: Optional[Dict[str, str]] = None
    body: Optional[str] = None
    version: str = DEFAULT_VERSION

    def __post_init__(self):
        self.status_code = str(self.status_code)
        if self.headers is None:
            self.headers = default_headers()

    @classmethod
    def new(
        cls,
        status_code: str | int,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> "HTTPResponse":
        """Create a response; status_text and default headers are derived."""
        return cls(status_code=str(status_code), headers=headers, body=body)

    @property
    def status_text(self) -> str:
        """Reason phrase derived from status_code ("Not Found" if unknown)."""
        return status_text(self.status_code)

    @property
    def status_line(self) -> str:
        """The first line of the response, without the CRLF."""
        return f"{self.version} {self.status_code} {self.status_text}"

    @property
    def content_length(self) -> int:
        """UTF-8 byte length of the body (0 when there is no body)."""
        if self.body is None:
            return 0
        return len(self.body.encode("utf-8"))

    def to_text(self) -> str:
        """
        Serialize the response to its wire text.

        Raises:
            MissingBodyError: If body is None.
        """
        if self.body is None:
            raise MissingBodyError(
                f"Cannot serialize {self.status_code} response without a body"
            )

        header_lines = "".join(
            f"{name}: {value}\r\n" for name, value in self.headers.items()
        )
        return (
            f"{self.status_line}\r\n"
            f"{header_lines}"
            f"Content-Length: {self.content_length}\r\n"
            f"\r\n"
            f"{self.body}"
        )

    def to_bytes(self) -> bytes:
        """Serialize the response to bytes ready for socket.sendall()."""
        return self.to_text().encode("utf-8")


class ResponseBuilder:
    """
    Fluent builder for HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("application/json")
            .body('{"ok": true}')
            .build())

    Headers start out unset. If no header is added before build(), the
    response gets the default header set; otherwise exactly the headers
    that were added.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Optional[Dict[str, str]] = None
        self._body = ""

    def status(self, status: HTTPStatus | int) -> "ResponseBuilder":
        """Set the status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a header, replacing any earlier value for the same name."""
        if self._headers is None:
            self._headers = {}
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Shortcut for header("Content-Type", ...)."""
        return self.header("Content-Type", content_type)

    def body(self, body: str) -> "ResponseBuilder":
        """Set the body text."""
        self._body = body
        return self

    def build(self) -> HTTPResponse:
        """Create the HTTPResponse."""
        return HTTPResponse.new(int(self._status), self._headers, self._body)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: str = "", content_type: Optional[str] = None) -> HTTPResponse:
    """200 OK with the given body (default headers unless content_type)."""
    builder = ResponseBuilder().body(body)
    if content_type is not None:
        builder.content_type(content_type)
    return builder.build()


def not_found(body: str = "") -> HTTPResponse:
    """404 Not Found with the default headers."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).body(body).build()


def internal_error(body: str = "") -> HTTPResponse:
    """500 Internal Server Error with the default headers."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).body(body).build()
