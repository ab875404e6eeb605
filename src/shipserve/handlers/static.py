"""
=============================================================================
STATIC PAGE HANDLER
=============================================================================

Serves documents from the public directory, picked by the FIRST path
segment only:

    ┌──────────────────────────┬────────────────────┬─────────────────────┐
    │  Request path            │  Document          │  If missing         │
    ├──────────────────────────┼────────────────────┼─────────────────────┤
    │  /                       │  index.html        │  200, empty body    │
    │  /health                 │  health.html       │  200, empty body    │
    │  /styles.css             │  styles.css        │  404 (not-found)    │
    │  /app.js                 │  app.js            │  404 (not-found)    │
    │  /about.html/ignored     │  about.html        │  404 (not-found)    │
    └──────────────────────────┴────────────────────┴─────────────────────┘

The index and health documents are always answered with 200 and the
default text/html Content-Type. Other documents get a Content-Type from
their extension (see mime_types.py) or are handed to the NotFoundHandler.

=============================================================================
"""

import logging

from ..http.mime_types import get_mime_type
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok
from ..providers import StaticAssetProvider
from .not_found import NotFoundHandler


logger = logging.getLogger(__name__)

INDEX_DOCUMENT = "index.html"
HEALTH_DOCUMENT = "health.html"


class StaticPageHandler:
    """
    Handler for public pages, stylesheets and scripts.

    Args:
        assets: Provider reading from the public directory.
        not_found: Handler used when a named document does not exist.
    """

    def __init__(self, assets: StaticAssetProvider, not_found: NotFoundHandler):
        self.assets = assets
        self.not_found = not_found

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        name = request.segment(1)

        # ─────────────────────────────────────────────────────────────────
        # FIXED PAGES: always 200, empty body if the document is gone
        # ─────────────────────────────────────────────────────────────────
        if name == "":
            return ok(self.assets.load(INDEX_DOCUMENT) or "")

        if name == "health":
            return ok(self.assets.load(HEALTH_DOCUMENT) or "")

        # ─────────────────────────────────────────────────────────────────
        # NAMED DOCUMENT
        # ─────────────────────────────────────────────────────────────────
        contents = self.assets.load(name)
        if contents is None:
            logger.debug(f"Static document not found: {name!r}")
            return self.not_found.handle(request)

        return ok(contents, content_type=get_mime_type(name))
