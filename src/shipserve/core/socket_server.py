"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket: create, bind, listen, accept in a loop, and hand
every accepted client to a callback as a Connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(connection_handler)                                         │
    │        │                                                             │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, 1s timeout │
    │        ├──► bind()             failure → ListenBindError             │
    │        ├──► listen(backlog)                                          │
    │        ├──► _setup_signals()   SIGINT/SIGTERM → shutdown()           │
    │        │                       (main thread only)                    │
    │        └──► _accept_loop()     BLOCKS until shutdown()               │
    │                 │                                                    │
    │                 └──► while running:                                  │
    │                         accept()                                     │
    │                         Connection(client_socket, address)           │
    │                         connection_handler(conn)                     │
    │                                                                      │
    │    shutdown()          flag the loop to stop (idempotent)            │
    │    _cleanup()          restore signal handlers, close the socket     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY THE ACCEPT TIMEOUT?
=============================================================================

accept() on a plain blocking socket never returns if nobody connects, so a
shutdown() from another thread or a signal handler would go unnoticed. The
listening socket gets a 1 second timeout and the loop re-checks its running
flag after each one:

    while running:
        try:
            accept()           ← returns or times out within 1s
        except timeout:
            continue           ← check running flag, loop again

Accepted client sockets do NOT keep this timeout (see connection.py).

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from .connection import Connection


logger = logging.getLogger(__name__)


class ListenBindError(OSError):
    """The listening socket could not be bound to the configured address."""


class SocketServer:
    """
    Low-level TCP socket server.

    Args:
        host: Address to bind.
        port: Port to bind (0 lets the OS pick one; see bound_address).
        backlog: Listen queue length.
        buffer_size: Read size handed to every Connection.
        accept_timeout: Seconds between running-flag checks.

    Usage:
        server = SocketServer("127.0.0.1", 3000)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(
        self,
        host: str,
        port: int,
        backlog: int = 128,
        buffer_size: int = 1024,
        accept_timeout: float = 1.0,
    ):
        self.host = host
        self.port = port
        self.backlog = backlog
        self.buffer_size = buffer_size
        self.accept_timeout = accept_timeout

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set while the socket is listening
        self._listening_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if the accept loop is running."""
        return self._running

    @property
    def bound_address(self) -> Optional[Tuple[str, int]]:
        """The (host, port) actually bound, or None before start()."""
        return self._bound_address

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting the server must not fail on sockets left in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); send them immediately
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.accept_timeout)
        return sock

    def bind(self):
        """
        Create, bind and listen without entering the accept loop.

        Raises:
            ListenBindError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.host, self.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.host}:{self.port}: {e}")
            self._socket.close()
            self._socket = None
            raise ListenBindError(f"Cannot bind {self.host}:{self.port}: {e}") from e

        self._socket.listen(self.backlog)
        self._bound_address = self._socket.getsockname()[:2]
        self._running = True
        self._listening_event.set()

    def _setup_signals(self):
        """
        Setup signal handlers for graceful shutdown.

        SIGTERM (docker stop, systemd, kill) and SIGINT (Ctrl+C) both call
        shutdown(). Python only allows installing handlers from the main
        thread, so servers started on any other thread skip this step.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind (if not done yet) and accept connections until shutdown().

        Args:
            connection_handler: Called with every accepted Connection. In
                                sequential mode it processes the request
                                inline; in pool mode it queues a job.

        Raises:
            ListenBindError: If the address cannot be bound.
        """
        if self._socket is None:
            self.bind()

        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Running on {host}:{port}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """Accept connections until the running flag is cleared."""
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                # Socket error - usually means we're shutting down
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Connection established from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.buffer_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from a signal handler, another thread, or more than
        once. The loop notices within accept_timeout seconds.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signals and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._listening_event.clear()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._listening_event.wait(timeout)
