"""
=============================================================================
HTTP SERVER - CONNECTION DISPATCHER
=============================================================================

HTTPServer ties the pieces together. It owns the listening socket and, for
every accepted connection, runs the same fixed pipeline:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     ONE CONNECTION, START TO FINISH                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. READ        one recv() of up to buffer_size bytes               │
    │   2. DECODE      UTF-8, invalid bytes replaced                       │
    │   3. PARSE       RequestParser → HTTPRequest                         │
    │                  MalformedRequestLine → empty UNINITIALIZED request  │
    │   4. ROUTE       Router → StaticPage / WebService / NotFound         │
    │                  handler exception → 500, empty body                 │
    │   5. SERIALIZE   HTTPResponse.to_bytes()                             │
    │   6. WRITE       sendall()                                           │
    │   7. CLOSE       one request per connection, no keep-alive           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Steps 1-7 always happen in this order for a connection. Different
connections are independent of each other.

=============================================================================
CONCURRENCY MODES
=============================================================================

    mode="sequential"
        The accepting thread runs steps 1-7 itself, then accepts the next
        connection. One slow client holds up everybody behind it.

    mode="pool"
        The accepting thread submits the connection as a Job to the
        ThreadPool and goes straight back to accept(). Up to `workers`
        connections are served in parallel.

Routers and handlers keep no per-connection state, so both modes share
exactly the same Router instance.

=============================================================================
FAILURE HANDLING
=============================================================================

    Unknown method / path / document   → 404 (never a connection reset)
    Malformed request line             → 404 (routed as UNINITIALIZED)
    Handler raised (bad orders.json)   → 500, logged with traceback
    Socket read/write failed           → logged, connection abandoned
    Bind failed                        → ListenBindError from run()

=============================================================================
"""

import logging
import time
from typing import Optional

from .access_log import RequestLog, log_request
from .config import ServerConfig
from .core import Connection, ConnectionIOError, ConnectionState, SocketServer, ThreadPool
from .handlers import NotFoundHandler, StaticPageHandler, WebServiceHandler
from .http import (
    HandlerKind,
    HTTPRequest,
    HTTPResponse,
    MalformedRequestLine,
    RequestParser,
    Router,
    internal_error,
)
from .providers import OrderDataProvider, StaticAssetProvider


logger = logging.getLogger(__name__)


def build_router(config: ServerConfig) -> Router:
    """
    Wire providers and handlers into a Router.

    Directories come from the config and nowhere else.
    """
    assets = StaticAssetProvider(config.public_dir)
    orders = OrderDataProvider(config.data_dir, config.orders_file)

    not_found = NotFoundHandler(assets)
    handlers = {
        HandlerKind.STATIC_PAGE: StaticPageHandler(assets, not_found),
        HandlerKind.WEB_SERVICE: WebServiceHandler(orders, not_found),
        HandlerKind.NOT_FOUND: not_found,
    }
    return Router(handlers, api_prefix=config.api_prefix)


class HTTPServer:
    """
    HTTP/1.1 server for the shipping site.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(host="127.0.0.1", port=3000, mode="pool")
        server = HTTPServer(config)
        server.run()            # blocks until SIGINT/SIGTERM or shutdown()

    From another thread:

        server.shutdown()       # accept loop stops, pool drains and joins

    =========================================================================

    Args:
        config: Server configuration. Validated on construction.
        router: Router to use instead of the one built from config.

    Raises:
        ConfigError: If the configuration is invalid.
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────
        self._socket_server = SocketServer(
            host=self.config.host,
            port=self.config.port,
            backlog=self.config.backlog,
            buffer_size=self.config.buffer_size,
        )
        self._parser = RequestParser()
        self._router = router or build_router(self.config)

        # Created by run() in pool mode
        self._thread_pool: Optional[ThreadPool] = None

        self._running = False

    @property
    def router(self) -> Router:
        return self._router

    @property
    def bound_address(self):
        """The (host, port) actually listening, once run() has bound."""
        return self._socket_server.bound_address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Blocks until shutdown() is called or SIGINT/SIGTERM is received
        (signals only when running on the main thread).

        Raises:
            ListenBindError: If the listen address cannot be bound.
        """
        self._setup_logging()

        if self.config.mode == "pool":
            self._thread_pool = ThreadPool(self.config.workers)

        self._running = True
        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until run() has bound the socket. False on timeout."""
        return self._socket_server.wait_until_listening(timeout)

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once the pool drained."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op if the application already configured the root logger
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("shipserve").setLevel(level)

    def _shutdown(self):
        """Stop the worker pool after every queued connection was served."""
        logger.info("Shutting down server...")
        self._running = False

        if self._thread_pool is not None:
            self._thread_pool.shutdown()
            self._thread_pool = None

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Called by SocketServer for each new connection.

        Sequential mode serves it right here; pool mode queues it.
        """
        if self._thread_pool is None:
            self.process_connection(conn)
        else:
            self._thread_pool.submit(self.process_connection, conn)

    def process_connection(self, conn: Connection):
        """
        Serve one connection: read, respond, close.

        Socket errors abandon this connection only and are not re-raised.
        """
        with conn:  # Context manager ensures connection is closed
            start_time = time.time()

            try:
                raw_request = conn.read_request()
            except ConnectionIOError as e:
                logger.warning(f"{e}; abandoning connection")
                return

            conn.state = ConnectionState.PROCESSING
            request, response = self.respond(raw_request)
            response_bytes = response.to_bytes()

            try:
                conn.send_response(response_bytes)
            except ConnectionIOError as e:
                logger.warning(f"{e}; abandoning connection")
                return

            log_request(
                RequestLog(
                    connection_id=conn.id,
                    client_ip=conn.client_ip,
                    method=request.method.value,
                    path=request.path,
                    status_code=response.status_code,
                    content_length=response.content_length,
                    duration_ms=(time.time() - start_time) * 1000,
                ),
                self.config.log_format,
            )

    def respond(self, raw_request: bytes | str) -> tuple[HTTPRequest, HTTPResponse]:
        """
        Turn raw request data into a request and its response.

        Never raises for bad input: malformed requests are routed as an
        empty UNINITIALIZED request, handler failures become a 500.
        """
        if isinstance(raw_request, bytes):
            raw_request = raw_request.decode("utf-8", errors="replace")

        # ─────────────────────────────────────────────────────────────────
        # PARSE
        # ─────────────────────────────────────────────────────────────────
        try:
            request = self._parser.parse(raw_request)
        except MalformedRequestLine as e:
            logger.debug(f"{e}; routing as uninitialized request")
            request = HTTPRequest()

        # ─────────────────────────────────────────────────────────────────
        # ROUTE
        # ─────────────────────────────────────────────────────────────────
        try:
            response = self._router.handle(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.path!r}: {e}")
            response = internal_error("")

        return request, response
