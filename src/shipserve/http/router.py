"""
=============================================================================
REQUEST ROUTING
=============================================================================

The router makes exactly one decision per request: which kind of handler
answers it. The decision looks at the method FIRST and the path second:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          Router.select()                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   method != GET ?                                                    │
    │       │                                                              │
    │       ├── yes ──► NOT_FOUND        (POST /api/... included)          │
    │       │                                                              │
    │       └── no ───► first segment == api_prefix ?                      │
    │                       │                                              │
    │                       ├── yes ──► WEB_SERVICE                        │
    │                       │                                              │
    │                       └── no ───► STATIC_PAGE                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Because the method is checked first, a POST is rejected the same way on
every path, API or not.

=============================================================================
DISPATCH TABLE
=============================================================================

The set of handler kinds is closed (HandlerKind). The router holds one
handler per kind in a plain dict and refuses to be built with a kind
missing, so handle() can never meet a kind it cannot dispatch:

    {
        HandlerKind.STATIC_PAGE: StaticPageHandler(...),
        HandlerKind.WEB_SERVICE: WebServiceHandler(...),
        HandlerKind.NOT_FOUND:   NotFoundHandler(...),
    }

The router keeps no state between requests. One instance is shared by
every worker thread.

=============================================================================
"""

import logging
from enum import Enum
from typing import Mapping, Protocol

from .request import HTTPRequest, Method
from .response import HTTPResponse


logger = logging.getLogger(__name__)


class HandlerKind(Enum):
    """The closed set of handler variants."""
    STATIC_PAGE = "static_page"
    WEB_SERVICE = "web_service"
    NOT_FOUND = "not_found"


class Handler(Protocol):
    """Anything that can produce a response for a request."""

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        ...


class Router:
    """
    Selects and invokes the handler for each request.

    Args:
        handlers: One handler for every HandlerKind.
        api_prefix: First path segment that selects the web service
                    ("api" → /api/...).

    Raises:
        ValueError: If a HandlerKind has no handler.
    """

    def __init__(self, handlers: Mapping[HandlerKind, Handler], api_prefix: str = "api"):
        missing = [kind.name for kind in HandlerKind if kind not in handlers]
        if missing:
            raise ValueError(f"No handler registered for: {', '.join(missing)}")

        self._handlers = dict(handlers)
        self.api_prefix = api_prefix

    def select(self, request: HTTPRequest) -> HandlerKind:
        """Decide which handler kind answers the request."""
        if request.method is not Method.GET:
            return HandlerKind.NOT_FOUND

        if request.segment(1) == self.api_prefix:
            return HandlerKind.WEB_SERVICE

        return HandlerKind.STATIC_PAGE

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Route the request and return the chosen handler's response."""
        kind = self.select(request)
        logger.debug(f"{request.method.value} {request.path!r} → {kind.name}")
        return self._handlers[kind].handle(request)
