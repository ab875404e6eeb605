"""
pytest configuration and fixtures.
"""

import json
import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shipserve import HTTPServer, ServerConfig


ORDERS = [
    {"order_id": 1, "order_date": "21 Jan 2020", "order_status": "Delivered"},
    {"order_id": 2, "order_date": "2 Feb 2020", "order_status": "Pending"},
]


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for the health page."""
    return (
        b"GET /health HTTP/1.1\r\n"
        b"Host: localhost:7878\r\n"
        b"User-Agent: pytest\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a one-line body."""
    return (
        b"POST /api/shipping/orders HTTP/1.1\r\n"
        b"Host: localhost:7878\r\n"
        b"Content-Type: text/plain\r\n"
        b"\r\n"
        b"order=3"
    )


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """Public directory with every document the handlers look for."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<h1>index</h1>", encoding="utf-8")
    (root / "health.html").write_text("<h1>health</h1>", encoding="utf-8")
    (root / "404.html").write_text("<h1>404</h1>", encoding="utf-8")
    (root / "styles.css").write_text("body { color: red; }", encoding="utf-8")
    (root / "app.js").write_text("console.log('hi');", encoding="utf-8")
    (root / "about.html").write_text("<p>about</p>", encoding="utf-8")
    return root


@pytest.fixture
def orders() -> list:
    """The order records written to orders.json by data_dir."""
    return [dict(order) for order in ORDERS]


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data directory holding a two-order orders.json."""
    root = tmp_path / "data"
    root.mkdir()
    (root / "orders.json").write_text(json.dumps(ORDERS), encoding="utf-8")
    return root


@pytest.fixture
def config(public_dir: Path, data_dir: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        mode="pool",
        workers=2,
        public_dir=public_dir,
        data_dir=data_dir,
        log_level="WARNING",
    )


def send_raw(port: int, data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes to the server and read until it closes the connection."""
    with socket.create_connection(('127.0.0.1', port), timeout=timeout) as s:
        s.sendall(data)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.bound_address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def request(self, data: bytes) -> bytes:
        return send_raw(self.port, data)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture(params=["sequential", "pool"])
def test_server(request, config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server, once per concurrency mode."""
    config.mode = request.param
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def start_server(config: ServerConfig):
    """Factory that starts a server for the given mode and stops it afterwards."""
    started = []

    def _start(mode: str = "pool") -> TestServer:
        config.mode = mode
        test_srv = TestServer(HTTPServer(config))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield _start

    for test_srv in started:
        test_srv.stop()
