"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every setting the server needs lives in one dataclass. Directories for
static pages and order data are ordinary fields here and are passed
explicitly into the providers; nothing else in the package reads the
environment.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m shipserve 127.0.0.1:3000 --mode sequential       │
    │                                                                      │
    │   2. Environment variables (ServerConfig.from_env)                  │
    │      └── SHIPSERVE_PUBLIC_DIR=/srv/www python -m shipserve ...      │
    │                                                                      │
    │   3. Defaults below                                                 │
    │      └── public/ and data/ bundled inside the package               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_PUBLIC_DIR = PACKAGE_DIR / "public"
DEFAULT_DATA_DIR = PACKAGE_DIR / "data"

MODES = ("sequential", "pool")
LOG_FORMATS = ("text", "json")

# field name -> (environment variable, converter)
ENV_VARS = {
    "host": ("SHIPSERVE_HOST", str),
    "port": ("SHIPSERVE_PORT", int),
    "mode": ("SHIPSERVE_MODE", str),
    "workers": ("SHIPSERVE_WORKERS", int),
    "public_dir": ("SHIPSERVE_PUBLIC_DIR", Path),
    "data_dir": ("SHIPSERVE_DATA_DIR", Path),
    "log_level": ("SHIPSERVE_LOG_LEVEL", str),
}


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a "host:port" listen address.

        >>> parse_address("127.0.0.1:3000")
        ('127.0.0.1', 3000)

    Raises:
        ConfigError: If the port is missing or not a number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"Listen address must be HOST:PORT, got {address!r}")

    try:
        return host, int(port)
    except ValueError:
        raise ConfigError(f"Invalid port in listen address {address!r}") from None


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    CONCURRENCY
    - mode, workers

    ROUTING AND DATA
    - api_prefix, public_dir, data_dir, orders_file

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (production)
    """

    port: int = 3000
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 1024
    """
    Bytes read from each connection, in a single recv().
    Larger requests are truncated to this size.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    mode: str = "pool"
    """
    "sequential" - handle each connection on the accepting thread
    "pool"       - hand each connection to the worker pool
    """

    workers: int = 4
    """Number of worker threads in pool mode."""

    # ─────────────────────────────────────────────────────────────────────
    # ROUTING AND DATA
    # ─────────────────────────────────────────────────────────────────────

    api_prefix: str = "api"
    """First path segment routed to the JSON web service (/api/...)."""

    public_dir: Path = field(default_factory=lambda: DEFAULT_PUBLIC_DIR)
    """Directory holding index.html, health.html, 404.html, css and js."""

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    """Directory holding the order data file."""

    orders_file: str = "orders.json"
    """Order data file name inside data_dir."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """
    Access log format: 'json' or 'text'.
    JSON is better for log aggregators, text for human reading.
    """

    def __post_init__(self):
        self.public_dir = Path(self.public_dir)
        self.data_dir = Path(self.data_dir)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls, **overrides) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        SHIPSERVE_HOST        Server host (default: 127.0.0.1)
        SHIPSERVE_PORT        Server port (default: 3000)
        SHIPSERVE_MODE        sequential | pool (default: pool)
        SHIPSERVE_WORKERS     Worker threads (default: 4)
        SHIPSERVE_PUBLIC_DIR  Static pages directory (default: bundled)
        SHIPSERVE_DATA_DIR    Order data directory (default: bundled)
        SHIPSERVE_LOG_LEVEL   Logging level (default: INFO)

        =====================================================================

        Args:
            **overrides: Field values that take priority over the
                         environment (command-line arguments). The variable
                         for an overridden field is not read at all.

        Raises:
            ConfigError: If a numeric variable is not a number.
        """
        values = dict(overrides)

        for name, (variable, convert) in ENV_VARS.items():
            if name in values or variable not in os.environ:
                continue

            raw = os.environ[variable]
            try:
                values[name] = convert(raw)
            except ValueError:
                raise ConfigError(f"Invalid value for {variable}: {raw!r}") from None

        return cls(**values)

    def validate(self) -> None:
        """
        Validate configuration values at startup.

        Raises:
            ConfigError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.mode not in MODES:
            raise ConfigError(f"mode must be one of {', '.join(MODES)}, got {self.mode!r}")

        if self.mode == "pool" and self.workers < 1:
            raise ConfigError("workers must be >= 1 in pool mode")

        if self.buffer_size < 1:
            raise ConfigError("buffer_size must be >= 1")

        if self.backlog < 1:
            raise ConfigError("backlog must be >= 1")

        if not self.api_prefix or "/" in self.api_prefix:
            raise ConfigError(f"api_prefix must be a single path segment, got {self.api_prefix!r}")

        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be 'text' or 'json', got {self.log_format!r}")
