"""
Unit tests for server configuration.
"""

from pathlib import Path

import pytest

from shipserve.config import (
    DEFAULT_DATA_DIR,
    DEFAULT_PUBLIC_DIR,
    ConfigError,
    ServerConfig,
    parse_address,
)


class TestParseAddress:
    """Tests for parse_address()."""

    def test_host_and_port(self):
        assert parse_address("127.0.0.1:3000") == ("127.0.0.1", 3000)

    def test_hostname(self):
        assert parse_address("localhost:7878") == ("localhost", 7878)

    @pytest.mark.parametrize("address", ["3000", ":3000", "localhost:", "localhost:http"])
    def test_invalid(self, address: str):
        with pytest.raises(ConfigError):
            parse_address(address)


class TestServerConfig:
    """Tests for ServerConfig class."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.port == 3000
        assert config.mode == "pool"
        assert config.workers == 4
        assert config.api_prefix == "api"
        assert config.buffer_size == 1024
        assert config.public_dir == DEFAULT_PUBLIC_DIR
        assert config.data_dir == DEFAULT_DATA_DIR
        config.validate()

    def test_bundled_assets_exist(self):
        """Test that the default directories ship with the package."""
        assert (DEFAULT_PUBLIC_DIR / "index.html").is_file()
        assert (DEFAULT_PUBLIC_DIR / "404.html").is_file()
        assert (DEFAULT_DATA_DIR / "orders.json").is_file()

    def test_string_dirs_become_paths(self):
        config = ServerConfig(public_dir="/tmp/www", data_dir="/tmp/data")

        assert config.public_dir == Path("/tmp/www")
        assert config.data_dir == Path("/tmp/data")

    def test_address(self):
        assert ServerConfig(host="0.0.0.0", port=80).address == "0.0.0.0:80"

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 70000},
        {"mode": "threads"},
        {"mode": "pool", "workers": 0},
        {"buffer_size": 0},
        {"backlog": 0},
        {"api_prefix": ""},
        {"api_prefix": "api/v1"},
        {"log_format": "xml"},
    ])
    def test_validate_rejects(self, kwargs: dict):
        with pytest.raises(ConfigError):
            ServerConfig(**kwargs).validate()

    def test_sequential_mode_ignores_workers(self):
        """Test that workers is only checked in pool mode."""
        ServerConfig(mode="sequential", workers=0).validate()

    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("SHIPSERVE_HOST", "0.0.0.0")
        monkeypatch.setenv("SHIPSERVE_PORT", "8080")
        monkeypatch.setenv("SHIPSERVE_MODE", "sequential")
        monkeypatch.setenv("SHIPSERVE_WORKERS", "8")
        monkeypatch.setenv("SHIPSERVE_PUBLIC_DIR", str(tmp_path / "www"))
        monkeypatch.setenv("SHIPSERVE_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("SHIPSERVE_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.mode == "sequential"
        assert config.workers == 8
        assert config.public_dir == tmp_path / "www"
        assert config.data_dir == tmp_path / "data"
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("SHIPSERVE_PUBLIC_DIR", "SHIPSERVE_DATA_DIR", "SHIPSERVE_PORT"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config.port == 3000
        assert config.public_dir == DEFAULT_PUBLIC_DIR
        assert config.data_dir == DEFAULT_DATA_DIR

    def test_from_env_bad_number(self, monkeypatch):
        monkeypatch.setenv("SHIPSERVE_PORT", "eighty")

        with pytest.raises(ConfigError):
            ServerConfig.from_env()

    def test_from_env_overrides_win(self, monkeypatch):
        """Test that overridden fields never read their variable."""
        monkeypatch.setenv("SHIPSERVE_PORT", "eighty")
        monkeypatch.setenv("SHIPSERVE_WORKERS", "8")

        config = ServerConfig.from_env(port=9000)

        assert config.port == 9000
        assert config.workers == 8
