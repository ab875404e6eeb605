"""
=============================================================================
SHIPSERVE - A SHIPPING-ORDERS HTTP SERVER FROM RAW SOCKETS
=============================================================================

A small HTTP/1.1 server built directly on the socket module. It serves a
handful of static pages and one JSON endpoint listing shipping orders.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ──accept──► Connection                                │
    │        │                       │                                     │
    │        │      mode="pool"      ▼                                     │
    │        └──────────────► ThreadPool.submit(process_connection)        │
    │                                │                                     │
    │                                ▼                                     │
    │                   RequestParser → HTTPRequest                        │
    │                                │                                     │
    │                                ▼                                     │
    │                             Router                                   │
    │              ┌─────────────────┼──────────────────┐                  │
    │              ▼                 ▼                  ▼                  │
    │      StaticPageHandler  WebServiceHandler  NotFoundHandler           │
    │              │                 │                  │                  │
    │    StaticAssetProvider  OrderDataProvider  StaticAssetProvider       │
    │              └─────────────────┼──────────────────┘                  │
    │                                ▼                                     │
    │                    HTTPResponse.to_bytes() → sendall → close         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ROUTES
=============================================================================

    GET /                     index.html
    GET /health               health.html
    GET /<name>               public/<name> (css, js or html)
    GET /api/shipping/orders  JSON list of orders from data/orders.json
    anything else             404 with 404.html

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, build_router
from .config import ConfigError, ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "ConfigError", "build_router", "__version__"]
