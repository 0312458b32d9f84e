"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle.

=============================================================================
TCP IS A STREAM, NOT MESSAGES
=============================================================================

recv() returns whatever bytes have arrived so far. A request sent by the
client in one write may show up in one recv() or in several:

    Client sends:    "GET / HTTP/1.1\r\nHost: x\r\n\r\n"

    recv() #1:       "GET / HTTP/1.1\r\nHo"
    recv() #2:       "st: x\r\n\r\n"

There are two ways to read a request, selected by ServerConfig.single_read:

    ┌─────────────────────────────────────────────────────────────────┐
    │  read_into(buffer)     ONE recv_into() into a fixed buffer      │
    │                        - never loops                             │
    │                        - larger requests are truncated           │
    │                        - bytes past the count keep old content   │
    ├─────────────────────────────────────────────────────────────────┤
    │  read_request()        recv() until "\r\n\r\n" or peer close     │
    │                        - capped at max_request_size              │
    │                        - over the cap: RequestTooLargeError      │
    └─────────────────────────────────────────────────────────────────┘

The classifier only looks at the first 16 bytes, so both modes give the
same answer for any request whose first line arrives in one piece.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
     │             │                 │                 │
     └─────────────┴────────► CLOSED ◄─────────────────┘

A connection never goes back to READING: there is no keep-alive.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..errors import ReadError, RequestTooLargeError, WriteError


logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """Connection lifecycle states (for logging and debugging)."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a single client connection.

    Owned exclusively by the handler that processes it and closed when
    that handler returns, whatever the outcome. Use it as a context
    manager:

        with conn:
            count = conn.read_into(buffer)
            ...
            conn.send_response(data)

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used in log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Bytes requested per recv() call.
        timeout: Read/write deadline in seconds, None for no deadline.
        max_request_size: Cap for read_request().
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = 30.0
    max_request_size: int = 64 * 1024

    def __post_init__(self):
        # Accepted sockets may inherit the listener's poll timeout.
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else "-"

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_into(self, buffer: bytearray) -> int:
        """
        Perform exactly one read into a fixed-size buffer.

        Only the first `count` bytes of the buffer are meaningful after
        this returns; the rest keep whatever they held before.

        Args:
            buffer: Writable buffer. Its length caps the read.

        Returns:
            Number of bytes read (0 if the peer closed without sending).

        Raises:
            ReadError: On reset, I/O error or timeout.
        """
        self.state = ConnectionState.READING
        try:
            return self.socket.recv_into(buffer)
        except socket.timeout as e:
            raise ReadError(f"Read timed out after {self.timeout}s") from e
        except OSError as e:
            raise ReadError(f"Read failed: {e}") from e

    def read_request(self) -> bytes:
        """
        Read until the end of the request headers or until the peer closes.

        Returns:
            The bytes read. May be empty if the peer closed immediately.

        Raises:
            RequestTooLargeError: If more than max_request_size bytes arrive
                                  before the blank line.
            ReadError: On reset, I/O error or timeout.
        """
        self.state = ConnectionState.READING
        data = b""

        while HEADER_TERMINATOR not in data:
            try:
                chunk = self.socket.recv(self.buffer_size)
            except socket.timeout as e:
                raise ReadError(f"Read timed out after {self.timeout}s") from e
            except OSError as e:
                raise ReadError(f"Read failed: {e}") from e

            if not chunk:
                break  # Peer closed its side

            data += chunk
            if len(data) > self.max_request_size:
                raise RequestTooLargeError(len(data), self.max_request_size)

        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> None:
        """
        Send the full response.

        sendall() keeps writing until every byte has been handed to the
        kernel, which is the flush guarantee: nothing stays buffered here.

        Raises:
            WriteError: If the peer is gone or the write times out.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except socket.timeout as e:
            raise WriteError(f"Write timed out after {self.timeout}s") from e
        except OSError as e:
            raise WriteError(f"Write failed: {e}") from e

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) first sends FIN so the client sees a clean end of
        stream after the response. Request bytes that already arrived but
        were never read (e.g. the tail of a truncated request) are then
        drained without waiting: closing a socket with unread data makes the
        kernel send RST, which can destroy the response before the client
        reads it. A peer that keeps its end open costs nothing extra here.
        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.setblocking(False)
            drained = 0
            while drained < self.max_request_size:
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Nothing pending (BlockingIOError) or peer gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
