"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Callable, Generator, List

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from contentserver import ContentServer, ServerConfig
from contentserver.core import listener as listener_module


@pytest.fixture
def root_get_request() -> bytes:
    """A request for the root page."""
    return b"GET / HTTP/1.1\r\n\r\n"


@pytest.fixture
def missing_request() -> bytes:
    """A request for a page the server doesn't have."""
    return b"GET /missing HTTP/1.1\r\n\r\n"


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """Document root with a 2-byte success page and a 4-byte fallback."""
    (tmp_path / "hello.html").write_bytes(b"hi")
    (tmp_path / "404.html").write_bytes(b"gone")
    return tmp_path


@pytest.fixture
def config(document_root: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(document_root),
        workers=0,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def fast_accept_poll(monkeypatch):
    """Make shutdown() take effect within a few milliseconds."""
    monkeypatch.setattr(listener_module, "ACCEPT_POLL_INTERVAL", 0.05)


@pytest.fixture
def socket_pair() -> Generator[tuple, None, None]:
    """A connected (client, server) socket pair."""
    client, server = socket.socketpair()
    yield client, server
    for sock in (client, server):
        try:
            sock.close()
        except OSError:
            pass


class ServerThread:
    """Runs a ContentServer in a background thread."""

    def __init__(self, server: ContentServer):
        self.server = server
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )

    @property
    def host(self) -> str:
        return self.server.address[0]

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self) -> "ServerThread":
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        return self

    def stop(self):
        self.server.shutdown()
        self._thread.join(timeout=5.0)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()


@pytest.fixture
def start_server(config: ServerConfig, fast_accept_poll) -> Generator[Callable[..., ServerThread], None, None]:
    """
    Factory fixture: start_server(**overrides) runs a server built from
    the test config with the given fields replaced.
    """
    started: List[ServerThread] = []

    def _start(**overrides) -> ServerThread:
        for name, value in overrides.items():
            setattr(config, name, value)
        running = ServerThread(ContentServer(config)).start()
        started.append(running)
        return running

    yield _start

    for running in started:
        running.stop()
