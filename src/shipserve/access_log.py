"""
=============================================================================
ACCESS LOG
=============================================================================

One structured line per connection, written to the "shipserve.access"
logger once the response has been sent.

    text:  127.0.0.1 - - [2026-10-18T09:12:01+00:00] "GET /health" 200 312 0.84ms
    json:  {"connection_id": "3f9a1c2e", "method": "GET", "path": "/health", ...}

Configure it separately from the application loggers if needed:

    logging.getLogger("shipserve.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone


logger = logging.getLogger("shipserve.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one request/response exchange.

    Attributes:
        connection_id: Connection identifier, matches other log lines.
        client_ip: Client IP address.
        method: Request method ("UNINITIALIZED" for unknown verbs).
        path: Request path.
        status_code: Response status code.
        content_length: Response body size in bytes.
        duration_ms: Time from read to send.
        timestamp: ISO 8601 UTC time the entry was created.
    """

    connection_id: str
    client_ip: str
    method: str
    path: str
    status_code: str
    content_length: int
    duration_ms: float
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "path": self.path,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Format in an Apache-like common log style."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog, log_format: str = "text"):
    """Emit an access log entry at INFO in the given format."""
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
