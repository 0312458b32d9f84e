"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the server can hit belongs to exactly one of these classes.
The class decides how far the failure is allowed to travel:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       FAILURE PROPAGATION                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   BindError          → aborts startup (no socket, nothing to serve) │
    │                                                                      │
    │   AcceptError        → logged, that accept() is skipped,            │
    │                        the accept loop keeps going                  │
    │                                                                      │
    │   ConnectionFailure  → logged, the connection is closed WITHOUT     │
    │     ReadError          a response, the accept loop keeps going      │
    │     ResourceError                                                   │
    │     WriteError                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A client hit by any per-connection failure just sees the socket close.
There is no protocol-level error response.

=============================================================================
"""


class ServerError(Exception):
    """Base class for all content server errors."""


class BindError(ServerError):
    """The listening socket could not be bound to the requested address."""

    def __init__(self, host: str, port: int, reason: str):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Failed to bind to {host}:{port}: {reason}")


class AcceptError(ServerError):
    """A single accept() call failed; the listener skips it and continues."""


class ConnectionFailure(ServerError):
    """
    A failure scoped to one connection.

    The connection is abandoned without a response. Nothing outside the
    handler for that connection is affected.
    """


class ReadError(ConnectionFailure):
    """Reading the request failed (peer reset, I/O error or timeout)."""


class RequestTooLargeError(ReadError):
    """The request grew past the configured maximum before it was complete."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Request too large: {size} bytes (limit {limit})")


class ResourceError(ConnectionFailure):
    """The on-disk resource selected for a request is missing or unreadable."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot load resource {name!r}: {reason}")


class WriteError(ConnectionFailure):
    """Sending the response failed; the connection is dropped, no retry."""
