"""
=============================================================================
CONTENTSERVER - Minimal Two-Page HTTP/1.1 Content Server
=============================================================================

A small TCP server that answers every request with one of two pages
from disk:

    GET / HTTP/1.1   ──►   HTTP/1.1 200 OK          + hello.html
    anything else    ──►   HTTP/1.1 404 NOT FOUND   + 404.html

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    contentserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m contentserver)
    ├── server.py            # ContentServer: accept → read → classify → resolve → write
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # BindError, AcceptError, ReadError, ...
    ├── accesslog.py         # Per-request access log (text / json)
    ├── client.py            # fetch() helper
    ├── core/                # Low-level components
    │   ├── listener.py      # Bound socket, accept_all()
    │   ├── connection.py    # One client socket, one request
    │   └── thread_pool.py   # Bounded worker pool
    ├── http/                # Wire protocol
    │   ├── classifier.py    # RequestShape, classify()
    │   ├── status_codes.py  # 200 OK / 404 NOT FOUND
    │   ├── resource.py      # Resource
    │   └── response.py      # HTTPResponse, write_response(), parse_response()
    ├── handlers/
    │   └── resolver.py      # ResourceResolver
    └── pages/               # Default hello.html / 404.html

=============================================================================
QUICK START
=============================================================================

    from contentserver import ContentServer, ServerConfig

    server = ContentServer(ServerConfig(port=7878, document_root="./pages"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import ContentServer

__all__ = ["ContentServer", "ServerConfig", "__version__"]
