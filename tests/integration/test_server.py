"""
Integration tests for the running server.

Every test in TestServing runs once per concurrency mode.
"""

import json
import socket
import threading
import time

import pytest

from shipserve import HTTPServer, ServerConfig
from shipserve.core import ListenBindError


def split_response(raw: bytes):
    """Split a raw response into (status line, headers dict, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body.decode("utf-8")

class TestServing:
    """End-to-end requests over real sockets."""

    def test_index(self, test_server):
        status, headers, body = split_response(
            test_server.request(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert headers["Content-Length"] == str(len(body))
        assert body == "<h1>index</h1>"

    def test_health_page(self, test_server, sample_get_request: bytes):
        status, _, body = split_response(test_server.request(sample_get_request))

        assert status == "HTTP/1.1 200 OK"
        assert body == "<h1>health</h1>"

    def test_stylesheet(self, test_server):
        status, headers, body = split_response(
            test_server.request(b"GET /styles.css HTTP/1.1\r\n\r\n")
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/css"
        assert body == "body { color: red; }"

    def test_orders(self, test_server, orders: list):
        status, headers, body = split_response(
            test_server.request(b"GET /api/shipping/orders HTTP/1.1\r\n\r\n")
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/json"
        assert json.loads(body) == orders

    @pytest.mark.parametrize("raw", [
        b"GET /api/shipping/unknown HTTP/1.1\r\n\r\n",
        b"GET /missing.html HTTP/1.1\r\n\r\n",
        b"GET HTTP/1.1\r\n\r\n",
        b"hello\r\n",
    ])
    def test_not_found(self, test_server, raw: bytes):
        status, _, body = split_response(test_server.request(raw))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == "<h1>404</h1>"

    def test_post_is_not_found(self, test_server, sample_post_request: bytes):
        status, _, _ = split_response(test_server.request(sample_post_request))
        assert status == "HTTP/1.1 404 Not Found"

    def test_broken_orders_file(self, test_server, data_dir):
        """Test that a bad orders.json gives 500 and the server keeps serving."""
        (data_dir / "orders.json").write_text("{", encoding="utf-8")

        status, _, body = split_response(
            test_server.request(b"GET /api/shipping/orders HTTP/1.1\r\n\r\n")
        )
        assert status == "HTTP/1.1 500 Internal Server Error"
        assert body == ""

        status, _, _ = split_response(test_server.request(b"GET / HTTP/1.1\r\n\r\n"))
        assert status == "HTTP/1.1 200 OK"

    def test_client_disconnect_does_not_stop_server(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port)):
            pass

        status, _, _ = split_response(test_server.request(b"GET / HTTP/1.1\r\n\r\n"))
        assert status == "HTTP/1.1 200 OK"

    def test_many_requests(self, test_server):
        results = []
        lock = threading.Lock()

        def fetch():
            raw = test_server.request(b"GET /health HTTP/1.1\r\n\r\n")
            with lock:
                results.append(split_response(raw)[0])

        threads = [threading.Thread(target=fetch) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert results == ["HTTP/1.1 200 OK"] * 20

class TestWorkerPool:
    """Tests that only hold for mode="pool"."""

    def test_slow_client_does_not_block_others(self, start_server):
        """Test that a silent connection occupies one worker, not the server."""
        server = start_server("pool")

        with socket.create_connection(("127.0.0.1", server.port), timeout=5.0) as idle:
            raw = server.request(b"GET / HTTP/1.1\r\n\r\n")
            assert split_response(raw)[0] == "HTTP/1.1 200 OK"

            idle.sendall(b"GET /health HTTP/1.1\r\n\r\n")
            assert idle.recv(4096).startswith(b"HTTP/1.1 200 OK")


class TestSequential:
    """Tests that only hold for mode="sequential"."""

    def test_clients_holding_sockets_open_are_served_quickly(self, start_server):
        """Test that the server never waits on a client after responding."""
        server = start_server("sequential")
        held = []

        start = time.monotonic()
        try:
            for _ in range(4):
                client = socket.create_connection(("127.0.0.1", server.port), timeout=5.0)
                held.append(client)
                client.sendall(b"GET /health HTTP/1.1\r\n\r\n")
                assert client.recv(4096).startswith(b"HTTP/1.1 200 OK")
            elapsed = time.monotonic() - start
        finally:
            for client in held:
                client.close()

        assert elapsed < 1.0


class TestLifecycle:
    """Tests for bind failure and shutdown."""

    def test_bind_conflict(self, config: ServerConfig):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            config.port = taken.getsockname()[1]

            with pytest.raises(ListenBindError, match="Cannot bind"):
                HTTPServer(config).run()

    @pytest.mark.parametrize("mode", ["sequential", "pool"])
    def test_shutdown_returns(self, start_server, mode: str):
        server = start_server(mode)
        server.stop()

        assert not server._thread.is_alive()
        assert not server.server.is_running
