"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the content server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                            LISTENER                                  │
    │  • Owns the bound TCP socket for the life of the process            │
    │  • accept_all(): lazy sequence of Connections                       │
    │  • A failed accept() is logged and skipped                          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ hands off each Connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                     THREAD POOL (optional)                          │
    │  • Fixed number of workers, bounded queue                           │
    │  • workers=0 skips it: connections are served on the accept thread  │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                           CONNECTION                                 │
    │  • One client socket, one request, one response, then closed        │
    │  • read_into() / read_request() / send_response() / close()         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState
from .listener import Listener
from .thread_pool import ThreadPool

__all__ = [
    "Connection",
    "ConnectionState",
    "Listener",
    "ThreadPool",
]
