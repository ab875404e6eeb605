"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with a handful of status codes, and the reason
phrase for each comes from a fixed lookup table:

    ┌────────┬───────────────────────────┬──────────────────────────────────┐
    │  Code  │  Reason phrase            │  When                            │
    ├────────┼───────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                       │  Page or order list served       │
    │  400   │  Bad Request              │  Available to callers            │
    │  404   │  Not Found                │  Unknown path, method or asset   │
    │  500   │  Internal Server Error    │  A handler raised                │
    └────────┴───────────────────────────┴──────────────────────────────────┘

Any code outside the table gets the phrase "Not Found". This keeps every
status line well-formed even for codes nobody registered.

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── status_text("404")
              └───────── status code as sent

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]

    @property
    def code(self) -> str:
        """The code as it appears on the wire ("200")."""
        return str(int(self))


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}

# Phrase used for every code missing from the table above
DEFAULT_PHRASE = "Not Found"


def status_text(status_code: str | int) -> str:
    """
    Get the reason phrase for a status code.

    Accepts the code as a string ("404") or an int (404).
    Unknown or non-numeric codes return DEFAULT_PHRASE.
    """
    try:
        return HTTPStatus(int(status_code)).phrase
    except ValueError:
        return DEFAULT_PHRASE
