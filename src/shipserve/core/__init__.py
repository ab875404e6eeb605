"""
Core networking: listening socket, client connections, worker pool.
"""

from .connection import Connection, ConnectionIOError, ConnectionState
from .socket_server import ListenBindError, SocketServer
from .thread_pool import (
    Job,
    PoolConfigurationError,
    PoolMisuseError,
    ThreadPool,
    Worker,
    WorkerState,
)

__all__ = [
    "Connection",
    "ConnectionIOError",
    "ConnectionState",
    "ListenBindError",
    "SocketServer",
    "Job",
    "PoolConfigurationError",
    "PoolMisuseError",
    "ThreadPool",
    "Worker",
    "WorkerState",
]
