"""
Embedded PostgreSQL server using testing.postgresql.

Used when no database URL is configured (development) and by the test
suite. Production deployments point [database] url at a real server.
"""

import atexit
import threading
from pathlib import Path

import testing.postgresql

# Servers by data directory
_servers: dict[str, "PostgresServer"] = {}
_lock = threading.Lock()


class PostgresServer:
    """Wrapper for testing.postgresql server."""

    def __init__(self, postgresql):
        self._postgresql = postgresql

    def get_uri(self) -> str:
        """Get PostgreSQL connection URI."""
        return self._postgresql.url()

    def stop(self) -> None:
        self._postgresql.stop()


def get_server(data_dir: str | Path) -> PostgresServer:
    """
    Get or start the embedded server for a data directory.

    Raises:
        RuntimeError: If PostgreSQL binaries (initdb, postgres) are not
            available on this machine
    """
    key = str(Path(data_dir))

    with _lock:
        if key in _servers:
            return _servers[key]

        # testing.postgresql keeps its cluster in a temporary directory;
        # data_dir only identifies the server
        postgresql = testing.postgresql.Postgresql()
        atexit.register(postgresql.stop)

        server = PostgresServer(postgresql)
        _servers[key] = server
        return server


def stop_all() -> None:
    """Stop every embedded server started by this process."""
    with _lock:
        for server in _servers.values():
            server.stop()
        _servers.clear()
