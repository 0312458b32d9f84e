"""
=============================================================================
TCP LISTENER
=============================================================================

Owns the bound server socket for the whole life of the process and turns
it into a lazy, never-ending sequence of client connections.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
    3. listen()    Mark it as listening; the OS starts queueing clients
    4. accept()    Wait for a client; returns a NEW socket for that client
    5. close()     Release the listening socket (process exit or shutdown)

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── bind() once at startup
                    └───────────┬───────────┘     Never sends/receives data
                                │  accept_all()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    Connection 1           Connection 2           Connection 3

=============================================================================
FAILURES
=============================================================================

bind() failing is fatal: there is nothing to serve without a socket, so
BindError propagates to the caller and startup stops.

accept() failing is NOT fatal. A client that resets the connection before
the handoff, or a transient "too many open files", only loses that one
accept. accept_all() logs an AcceptError and moves on to the next client.

=============================================================================
"""

import socket
import logging
import threading
from typing import Iterator, Optional, Tuple

from ..config import ServerConfig
from ..errors import AcceptError, BindError
from .connection import Connection


logger = logging.getLogger(__name__)

# How often accept() wakes up to notice shutdown().
ACCEPT_POLL_INTERVAL = 1.0


class Listener:
    """
    Bound TCP server socket.

    Usage:
        listener = Listener(config).bind()   # raises BindError

        for conn in listener.accept_all():   # blocks between clients
            handle(conn)

    The sequence ends only after shutdown(); a listener can't be restarted
    once its socket is closed.
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening; lets other threads wait for it.
        self._ready = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); reports the real port when port=0."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting for TIME_WAIT sockets to expire.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold the tail.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def bind(self) -> "Listener":
        """
        Bind and start listening.

        Returns:
            Self, so `Listener(config).bind()` reads naturally.

        Raises:
            BindError: Address in use, permission denied, bad host, etc.
        """
        sock = self._create_socket()

        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise BindError(self.config.host, self.config.port, e.strerror or str(e)) from e

        self._socket = sock
        self._running = True
        self._ready.set()

        host, port = self.address
        logger.info(f"Listening on {host}:{port}")
        return self

    def accept_all(self) -> Iterator[Connection]:
        """
        Yield accepted connections until shutdown().

        A failed accept() is logged and skipped; it never ends the sequence.
        """
        if self._socket is None:
            raise RuntimeError("Listener is not bound")

        try:
            while self._running:
                try:
                    conn = self.accept()
                except socket.timeout:
                    continue  # Poll tick, check _running again
                except AcceptError as e:
                    if not self._running:
                        break  # Socket closed under us by shutdown()
                    logger.error(f"Accept error: {e}")
                    continue

                yield conn
        finally:
            self.close()

    def accept(self) -> Connection:
        """
        Accept one client and wrap it in a Connection.

        Raises:
            socket.timeout: No client arrived within the poll interval.
            AcceptError: accept() failed for any other reason.
        """
        try:
            client_socket, client_address = self._socket.accept()
        except socket.timeout:
            raise
        except OSError as e:
            raise AcceptError(str(e)) from e

        logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

        return Connection(
            socket=client_socket,
            address=client_address,
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_request_size=self.config.max_request_size,
        )

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until bind() has succeeded. Returns False on timeout."""
        return self._ready.wait(timeout)

    def shutdown(self):
        """
        Stop accept_all(). Idempotent; safe to call from any thread or
        a signal handler. The generator closes the socket on its way out.
        """
        if self._running:
            logger.info("Shutting down listener...")
        self._running = False

    def close(self):
        """Close the listening socket."""
        self._running = False
        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
            logger.info("Listener closed")
