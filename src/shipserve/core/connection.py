"""
=============================================================================
CLIENT CONNECTION
=============================================================================

A Connection wraps the socket returned by accept() for the lifetime of one
request/response exchange:

    accept() ──► Connection ──► read_request() ──► send_response() ──► close()
                   NEW            READING           WRITING            CLOSED

=============================================================================
ONE READ, NO TIMEOUT
=============================================================================

read_request() performs a SINGLE recv() of at most buffer_size bytes. There
is no loop waiting for a blank line or a Content-Length:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   client sends 3000 bytes, buffer_size = 1024                        │
    │                                                                      │
    │   read_request() → first ≤1024 bytes                                 │
    │   the rest is never read; the parser sees a truncated request        │
    └─────────────────────────────────────────────────────────────────────┘

This is a known limitation of the server, kept as-is. Requests that fit in
one buffer (every request a browser sends to this server) are unaffected.

Accepted sockets are put in blocking mode with no timeout. A slow client
blocks whichever thread is serving it until it sends or disconnects.

=============================================================================
ERRORS
=============================================================================

Socket failures while reading or writing are raised as ConnectionIOError.
The dispatcher logs them and abandons that one connection; the server keeps
running.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class ConnectionIOError(OSError):
    """Reading from or writing to a client socket failed."""


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and to make close() idempotent.
    """
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading request data
    PROCESSING = "processing"  # Parsing and routing
    WRITING = "writing"        # Sending response data
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        buffer_size: Maximum number of bytes read for the request.
        id: Short unique identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple
    buffer_size: int = 1024

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # No per-connection timeout, unlike the listening socket
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        """Get the client IP address ("" for unnamed sockets)."""
        if isinstance(self.address, tuple) and self.address:
            return str(self.address[0])
        return ""

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    def read_request(self) -> bytes:
        """
        Read the request with a single recv() of up to buffer_size bytes.

        Returns:
            The bytes read. b"" if the client closed without sending.

        Raises:
            ConnectionIOError: If the socket read fails.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            raise ConnectionIOError(f"[{self.id}] Read failed: {e}") from e

        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    def send_response(self, data: bytes):
        """
        Send the full response to the client.

        Uses sendall() so the whole buffer is written or an error is raised.

        Raises:
            ConnectionIOError: If the socket write fails.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            raise ConnectionIOError(f"[{self.id}] Send failed: {e}") from e

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. discard request bytes already received but never read, so the
           kernel does not answer close() with a reset
        3. close(): release the file descriptor

        Never waits for the client: one request per connection, and the
        client may keep its end open as long as it likes.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.setblocking(False)
            while self.socket.recv(self.buffer_size):
                pass
        except OSError:
            pass  # BlockingIOError: nothing left to discard

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                data = conn.read_request()
                conn.send_response(response)
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False
