"""
Route handlers.

Each handler exposes one method, handle(request) -> HTTPResponse:

    StaticPageHandler  - index, health and named public documents
    WebServiceHandler  - JSON shipping orders under the API prefix
    NotFoundHandler    - 404 with the not-found document
"""

from .not_found import NotFoundHandler
from .static import StaticPageHandler
from .web_service import WebServiceHandler

__all__ = [
    "NotFoundHandler",
    "StaticPageHandler",
    "WebServiceHandler",
]
