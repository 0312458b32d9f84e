"""
Unit tests for the TCP listener and its accept sequence.
"""

import socket

import pytest

from contentserver import ContentServer, ServerConfig
from contentserver.core.listener import Listener
from contentserver.errors import BindError


class FlakySocket:
    """
    Listening-socket stand-in.

    accept() fails `failures` times, then hands out the queued clients,
    then shuts the listener down.
    """

    def __init__(self, listener: Listener, failures: int, clients: list):
        self.listener = listener
        self.failures = failures
        self.clients = list(clients)
        self.accept_calls = 0
        self.closed = False

    def accept(self):
        self.accept_calls += 1
        if self.failures:
            self.failures -= 1
            raise ConnectionAbortedError(103, "Software caused connection abort")
        if self.clients:
            return self.clients.pop(0)
        self.listener.shutdown()
        raise socket.timeout("timed out")

    def getsockname(self):
        return ("127.0.0.1", 0)

    def close(self):
        self.closed = True


def make_clients(count: int):
    """Create socket pairs; returns (client ends, accept() results)."""
    client_ends, accepted = [], []
    for i in range(count):
        client, server = socket.socketpair()
        client_ends.append(client)
        accepted.append((server, (f"10.0.0.{i + 1}", 40000 + i)))
    return client_ends, accepted


def install(listener: Listener, fake: FlakySocket):
    listener._socket = fake
    listener._running = True


class TestBind:
    """Tests for Listener.bind()."""

    def test_bind_ephemeral_port(self, config: ServerConfig):
        listener = Listener(config).bind()
        try:
            host, port = listener.address
            assert host == "127.0.0.1"
            assert port > 0
            assert listener.is_running
            assert listener.wait_until_ready(timeout=0)
        finally:
            listener.close()

    def test_address_in_use_is_bind_error(self, config: ServerConfig):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            config.port = taken.getsockname()[1]

            with pytest.raises(BindError) as exc_info:
                Listener(config).bind()

        assert exc_info.value.port == config.port
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_accept_before_bind(self, config: ServerConfig):
        with pytest.raises(RuntimeError):
            next(Listener(config).accept_all())


class TestAcceptAll:
    """Tests for the lazy accept sequence."""

    def test_accept_failure_does_not_end_sequence(self, config: ServerConfig):
        """One failing accept followed by N successful ones yields all N."""
        client_ends, accepted = make_clients(3)
        listener = Listener(config)
        fake = FlakySocket(listener, failures=1, clients=accepted)
        install(listener, fake)

        connections = []
        try:
            connections = list(listener.accept_all())

            assert [c.address for c in connections] == [a for _, a in accepted]
            assert fake.accept_calls == 5  # 1 failure + 3 clients + shutdown tick
            assert fake.closed
        finally:
            for sock in client_ends:
                sock.close()
            for conn in connections:
                conn.close()

    def test_repeated_failures_are_logged(self, config: ServerConfig, caplog):
        client_ends, accepted = make_clients(1)
        listener = Listener(config)
        install(listener, FlakySocket(listener, failures=3, clients=accepted))

        with caplog.at_level("ERROR", logger="contentserver.core.listener"):
            connections = list(listener.accept_all())

        assert len(connections) == 1
        assert sum("Accept error" in r.message for r in caplog.records) == 3

        for conn in connections:
            conn.close()
        for sock in client_ends:
            sock.close()

    def test_connections_carry_config(self, config: ServerConfig):
        config.buffer_size = 2048
        config.timeout = 1.5
        client_ends, accepted = make_clients(1)
        listener = Listener(config)
        install(listener, FlakySocket(listener, failures=0, clients=accepted))

        (conn,) = list(listener.accept_all())

        assert conn.buffer_size == 2048
        assert conn.timeout == 1.5
        assert conn.socket.gettimeout() == 1.5

        conn.close()
        client_ends[0].close()

    def test_all_served_after_accept_failure(self, config: ServerConfig, root_get_request: bytes):
        """End to end: an accept failure doesn't stop the server from serving the rest."""
        client_ends, accepted = make_clients(4)
        server = ContentServer(config)
        listener = server._listener

        def fake_bind():
            install(listener, FlakySocket(listener, failures=1, clients=accepted))
            return listener

        listener.bind = fake_bind

        for client in client_ends:
            client.sendall(root_get_request)
            client.shutdown(socket.SHUT_WR)

        server.run(configure_logging=False)

        for client in client_ends:
            data = b""
            while True:
                chunk = client.recv(1024)
                if not chunk:
                    break
                data += chunk
            client.close()

            assert data == b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nhi"
