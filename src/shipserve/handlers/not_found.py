"""
Not-found handler.

Every request nobody else wants ends up here: unknown methods, unknown
API paths, missing static documents. The answer is always a 404 whose body
is the public 404.html document, or an empty body if that document is
missing too.
"""

import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, not_found
from ..providers import StaticAssetProvider


logger = logging.getLogger(__name__)

NOT_FOUND_DOCUMENT = "404.html"


class NotFoundHandler:
    """Answers every request with 404 and the not-found document."""

    def __init__(self, assets: StaticAssetProvider):
        self.assets = assets

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        body = self.assets.load(NOT_FOUND_DOCUMENT)
        if body is None:
            logger.debug(f"{NOT_FOUND_DOCUMENT} missing, answering with empty body")
            body = ""
        return not_found(body)
