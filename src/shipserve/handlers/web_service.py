"""
JSON web-service handler.

Only one endpoint exists under the API prefix:

    GET /api/shipping/orders      → 200, JSON array of order records
    GET /api/shipping/orders/7    → same (trailing segments are ignored)
    GET /api/anything/else        → 404 via NotFoundHandler

The router only sends requests here when the first segment is the API
prefix, so this handler looks at segments 2 and 3.
"""

import json
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok
from ..providers import OrderDataProvider
from .not_found import NotFoundHandler


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class WebServiceHandler:
    """
    Serves shipping orders as JSON.

    Errors raised by the order-data provider are not caught here. The
    dispatcher turns them into a 500 response.
    """

    def __init__(self, orders: OrderDataProvider, not_found: NotFoundHandler):
        self.orders = orders
        self.not_found = not_found

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        if request.segment(2) == "shipping" and request.segment(3) == "orders":
            records = self.orders.load_orders()
            body = json.dumps([record.to_dict() for record in records])
            logger.debug(f"Serving {len(records)} orders")
            return ok(body, content_type=JSON_CONTENT_TYPE)

        return self.not_found.handle(request)
