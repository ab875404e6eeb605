"""
=============================================================================
DATA PROVIDERS
=============================================================================

Handlers never touch the filesystem directly. They ask one of two
providers, each constructed with an explicit directory taken from
ServerConfig:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   StaticAssetProvider(public_dir)                                    │
    │       read("index.html")  → file contents                            │
    │       read("nope.html")   → MissingAsset                             │
    │       load("nope.html")   → None                                     │
    │                                                                      │
    │   OrderDataProvider(data_dir)                                        │
    │       load_orders()       → [OrderStatus, OrderStatus, ...]          │
    │                             read from data_dir/orders.json           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PATH TRAVERSAL
=============================================================================

Asset names come straight from the URL, so "/..%2F..%2Fetc/passwd" style
names must never escape the public directory. Every name is resolved
(following ".." and symlinks) and rejected unless the result is still
inside the root:

    root_dir  = /srv/public
    "app.js"           → /srv/public/app.js        ✓
    "../secrets.txt"   → /srv/secrets.txt          ✗ MissingAsset

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class MissingAsset(LookupError):
    """The requested static document does not exist or cannot be read."""


class OrderDataError(Exception):
    """The order data file is missing or does not hold a list of orders."""


@dataclass(frozen=True)
class OrderStatus:
    """
    One shipping order record.

    Serializes to {"order_id": 1, "order_date": "...", "order_status": "..."}
    """

    order_id: int
    order_date: str
    order_status: str

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "OrderStatus":
        """
        Build a record from decoded JSON.

        Raises:
            OrderDataError: If a field is missing or has the wrong type.
        """
        try:
            order_id = data["order_id"]
            order_date = data["order_date"]
            order_status = data["order_status"]
        except (KeyError, TypeError) as e:
            raise OrderDataError(f"Order record is missing a field: {e}") from e

        if isinstance(order_id, bool) or not isinstance(order_id, int):
            raise OrderDataError(f"order_id must be an integer, got {order_id!r}")
        if not isinstance(order_date, str) or not isinstance(order_status, str):
            raise OrderDataError("order_date and order_status must be strings")

        return cls(order_id=order_id, order_date=order_date, order_status=order_status)


class StaticAssetProvider:
    """
    Reads static documents from a root directory.

    Args:
        root_dir: Directory holding index.html, health.html, 404.html and
                  any other page, stylesheet or script.
        encoding: Text encoding of the documents.
    """

    def __init__(self, root_dir: str | Path, encoding: str = "utf-8"):
        self.root_dir = Path(root_dir).resolve()
        self.encoding = encoding

    def _resolve(self, name: str) -> Path:
        """
        Resolve an asset name to a path inside root_dir.

        Raises:
            MissingAsset: If the name is empty, not a valid file name
                          (e.g. contains a NUL byte) or resolves outside
                          root_dir.
        """
        if not name:
            raise MissingAsset("Empty asset name")

        try:
            full_path = (self.root_dir / name).resolve()
        except (OSError, ValueError) as e:
            logger.debug(f"Unusable asset name {name!r}: {e}")
            raise MissingAsset(name) from e

        # Must stay inside root_dir after ".." and symlinks are followed
        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt blocked: {name!r}")
            raise MissingAsset(name)

        return full_path

    def read(self, name: str) -> str:
        """
        Read a document by file name.

        Raises:
            MissingAsset: If the document does not exist or cannot be read.
        """
        path = self._resolve(name)
        if not path.is_file():
            raise MissingAsset(name)

        try:
            return path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read asset {path}: {e}")
            raise MissingAsset(name) from e

    def load(self, name: str) -> Optional[str]:
        """Read a document, returning None instead of raising."""
        try:
            return self.read(name)
        except MissingAsset:
            return None


class OrderDataProvider:
    """
    Loads shipping orders from a JSON file.

    The file holds a JSON array:

        [
            {"order_id": 1, "order_date": "21 Jan 2020", "order_status": "Delivered"},
            ...
        ]

    The file is read on every call; nothing is cached between requests.
    """

    def __init__(self, data_dir: str | Path, file_name: str = "orders.json"):
        self.data_dir = Path(data_dir)
        self.file_name = file_name

    @property
    def path(self) -> Path:
        return self.data_dir / self.file_name

    def load_orders(self) -> list[OrderStatus]:
        """
        Read every order from the data file, in file order.

        Raises:
            OrderDataError: If the file is missing, is not valid JSON, or
                            does not hold a list of order records.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise OrderDataError(f"Cannot read order data {self.path}: {e}") from e

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise OrderDataError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(records, list):
            raise OrderDataError(f"{self.path} must contain a JSON array")

        return [OrderStatus.from_dict(record) for record in records]
