"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

This module turns the raw text read from a client socket into a structured
HTTPRequest object.

=============================================================================
WHAT THE PARSER SEES
=============================================================================

The dispatcher performs exactly one read per connection and hands us the
decoded text. A typical request looks like this:

    GET /api/shipping/orders HTTP/1.1\\r\\n       ← Request line
    Host: localhost:3000\\r\\n                     ← Header
    Accept: application/json\\r\\n                 ← Header
    \\r\\n                                          ← Blank line (skipped)
    {"optional": "body"}                         ← Body

The parser is deliberately forgiving. It works line by line, skips blank
lines, and classifies every line by looking for two markers:

    "HTTP"  → this is the request line (only the first one counts)
    ": "    → this is a header line

Anything else starts the body.

=============================================================================
THE PHASE STATE MACHINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ParsePhase transitions                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ┌───────────────┐  line contains "HTTP"   ┌───────────────┐       │
    │   │ REQUEST_LINE  │ ───────────────────────►│    HEADERS    │       │
    │   └───────┬───────┘                         └───────┬───────┘       │
    │           │  ▲                                       │  ▲           │
    │           │  └── line contains ": "                  │  └── ": "    │
    │           │      (header, phase unchanged)           │              │
    │           │                                          │              │
    │           │ anything else                            │ anything else│
    │           ▼                                          ▼              │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │                           BODY                               │   │
    │   │   Every remaining non-empty line is appended to the body     │   │
    │   │   with no separator. There is no way back out of BODY.      │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only one request line is ever recognised. Once the parser has left the
REQUEST_LINE phase, a line containing "HTTP" is treated like any other line
for the phase it appears in.

=============================================================================
PERMISSIVE TOKENS, STRICT SHAPE
=============================================================================

Unknown methods (PUT, DELETE, BREW...) and unknown versions (HTTP/1.0) are
NOT errors. They map to the UNINITIALIZED member of their enum and the router
answers them with a 404.

A request line with fewer than three fields IS an error:

    "GET HTTP/1.1"   → MalformedRequestLine
    "BREW / HTTP/1.1" → Method.UNINITIALIZED (parses fine)

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code that best describes the failure, so callers
    that want to answer with a dedicated error page can do so.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MalformedRequestLine(HTTPParseError):
    """The request line was found but has fewer than three fields."""


class Method(Enum):
    """
    HTTP methods understood by this server.

    Only GET and POST are recognised. Every other token maps to
    UNINITIALIZED instead of raising, so parsing never fails on an unknown
    verb.
    """
    GET = "GET"
    POST = "POST"
    UNINITIALIZED = "UNINITIALIZED"

    @classmethod
    def from_token(cls, token: str) -> "Method":
        """Map a request-line token to a Method (unknown → UNINITIALIZED)."""
        if token == "GET":
            return cls.GET
        if token == "POST":
            return cls.POST
        return cls.UNINITIALIZED


class Version(Enum):
    """HTTP versions understood by this server (unknown → UNINITIALIZED)."""
    HTTP_1_1 = "HTTP/1.1"
    HTTP_2_0 = "HTTP/2.0"
    UNINITIALIZED = "UNINITIALIZED"

    @classmethod
    def from_token(cls, token: str) -> "Version":
        if token == "HTTP/1.1":
            return cls.HTTP_1_1
        if token == "HTTP/2.0":
            return cls.HTTP_2_0
        return cls.UNINITIALIZED


class ParsePhase(Enum):
    """Where the parser is in the request (see module docstring)."""
    REQUEST_LINE = "request_line"
    HEADERS = "headers"
    BODY = "body"


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:   Method enum member (GET, POST or UNINITIALIZED)

        path:     Request target exactly as sent, e.g. "/api/shipping/orders"
                  Empty string when no request line was found

        version:  Version enum member

        headers:  Header name → value, names kept exactly as sent.
                  Duplicate names: the last one wins

        body:     Every body line concatenated without separators

    =========================================================================
    LIFECYCLE
    =========================================================================

    A request is built once per connection, never mutated (frozen=True),
    and discarded once the response bytes have been written.

    =========================================================================
    """

    method: Method = Method.UNINITIALIZED
    path: str = ""
    version: Version = Version.UNINITIALIZED
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def segments(self) -> list[str]:
        """
        The path split on "/".

        "/api/shipping/orders" → ["", "api", "shipping", "orders"]
        """
        return self.path.split("/")

    def segment(self, index: int) -> str:
        """Get one path segment, or "" when the path is too short."""
        segments = self.segments
        if index < len(segments):
            return segments[index]
        return ""

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value by its exact name."""
        return self.headers.get(name, default)

    def to_text(self) -> str:
        """
        Reconstruct a wire form of this request.

        Parsing the result yields an equal request as long as the request is
        well-formed: it has a request line, header names carry no ": ", and
        the body is a single line that does not itself look like a header.
        """
        lines = [f"{self.method.value} {self.path} {self.version.value}"]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        return "\r\n".join(lines) + "\r\n\r\n" + self.body


class RequestParser:
    """
    Parses raw request text into HTTPRequest objects.

    The parser is stateless between calls; one instance can be shared by
    every worker thread.

        parser = RequestParser()
        request = parser.parse("GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
    """

    REQUEST_LINE_MARKER = "HTTP"
    HEADER_SEPARATOR = ": "

    def parse(self, data: str | bytes) -> HTTPRequest:
        """
        Parse raw request data.

        Args:
            data: Request text. Bytes are decoded as UTF-8, replacing
                  invalid sequences.

        Returns:
            The parsed request. Empty input gives an all-default request.

        Raises:
            MalformedRequestLine: The request line has fewer than 3 fields.
        """
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")

        phase = ParsePhase.REQUEST_LINE
        method = Method.UNINITIALIZED
        path = ""
        version = Version.UNINITIALIZED
        headers: Dict[str, str] = {}
        body_parts: list[str] = []

        for line in self._lines(data):
            # ─────────────────────────────────────────────────────────────
            # BODY: absorbs everything, never left
            # ─────────────────────────────────────────────────────────────
            if phase is ParsePhase.BODY:
                body_parts.append(line)
                continue

            if phase is ParsePhase.REQUEST_LINE and self.REQUEST_LINE_MARKER in line:
                method, path, version = self._parse_request_line(line)
                phase = ParsePhase.HEADERS
            elif self.HEADER_SEPARATOR in line:
                key, value = line.split(self.HEADER_SEPARATOR, 1)
                headers[key] = value
            else:
                phase = ParsePhase.BODY
                body_parts.append(line)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body="".join(body_parts),
        )

    @staticmethod
    def _lines(data: str):
        """Yield the non-empty lines of data, accepting LF or CRLF endings."""
        for line in data.split("\n"):
            if line.endswith("\r"):
                line = line[:-1]
            if line:
                yield line

    @staticmethod
    def _parse_request_line(line: str) -> tuple[Method, str, Version]:
        # METHOD SP PATH SP VERSION; fields past the third are ignored
        fields = line.split()
        if len(fields) < 3:
            raise MalformedRequestLine(f"Malformed request line: {line!r}")

        return Method.from_token(fields[0]), fields[1], Version.from_token(fields[2])


def parse_request(data: str | bytes) -> HTTPRequest:
    """Parse request data with a fresh RequestParser."""
    return RequestParser().parse(data)
