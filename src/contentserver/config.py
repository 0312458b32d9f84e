"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the content server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m contentserver --port 3000                       │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── CONTENTSERVER_PORT=3000 python -m contentserver           │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Configuration is validated once at startup (fail-fast). A bad value is
a ValueError before any socket is created.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .http.classifier import ROOT_GET_PREFIX


DEFAULT_DOCUMENT_ROOT = str(Path(__file__).parent / "pages")

LOG_FORMATS = ("text", "json")

ENV_PREFIX = "CONTENTSERVER_"


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the content server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    REQUEST READING
    - buffer_size, max_request_size, single_read

    CONCURRENCY
    - workers, queue_size, queue_timeout

    STORAGE
    - document_root, success_page, not_found_page

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to."""

    port: int = 7878
    """The port to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued connections in the kernel accept queue."""

    timeout: Optional[float] = 30.0
    """
    Per-connection read/write deadline in seconds.
    None = no deadline (a silent peer holds its handler forever).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST READING
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 1024
    """
    Capacity of the request buffer. Fixed for the process lifetime.
    In single-read mode, requests larger than this are truncated.
    """

    max_request_size: int = 64 * 1024
    """
    Upper bound for a request read until the blank line (single_read=False).
    Requests that exceed it are rejected with RequestTooLargeError.
    """

    single_read: bool = True
    """
    Read each request with exactly one recv() into the fixed buffer.
    False = read until the blank line that ends the headers, rejecting
    requests over max_request_size.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 0
    """
    Number of worker threads serving connections.
    0 = serve every connection on the accept thread, strictly in order.
    """

    queue_size: int = 64
    """Maximum number of accepted connections waiting for a worker."""

    queue_timeout: float = 5.0
    """Seconds the accept loop waits for queue space before dropping a connection."""

    # ─────────────────────────────────────────────────────────────────────
    # STORAGE
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = DEFAULT_DOCUMENT_ROOT
    """Directory holding the success and not-found pages."""

    success_page: str = "hello.html"
    not_found_page: str = "404.html"

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (common log style) or 'json'."""

    server_name: str = field(default="contentserver/1.0", repr=False)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        CONTENTSERVER_HOST         Server host (default: 127.0.0.1)
        CONTENTSERVER_PORT         Server port (default: 7878)
        CONTENTSERVER_ROOT         Document root (default: bundled pages)
        CONTENTSERVER_WORKERS      Worker threads, 0 = sequential (default: 0)
        CONTENTSERVER_TIMEOUT      Connection deadline in seconds, 0 = none
        CONTENTSERVER_BUFFER_SIZE  Request buffer size (default: 1024)
        CONTENTSERVER_SINGLE_READ  0/false to read until the blank line (default: 1)
        CONTENTSERVER_LOG_LEVEL    Logging level (default: INFO)
        CONTENTSERVER_LOG_FORMAT   Access log format (default: text)

        =====================================================================
        """
        def env(name: str, default: str) -> str:
            return os.getenv(ENV_PREFIX + name, default)

        timeout = float(env("TIMEOUT", "30"))

        return cls(
            host=env("HOST", "127.0.0.1"),
            port=int(env("PORT", "7878")),
            document_root=env("ROOT", DEFAULT_DOCUMENT_ROOT),
            workers=int(env("WORKERS", "0")),
            timeout=timeout if timeout > 0 else None,
            buffer_size=int(env("BUFFER_SIZE", "1024")),
            single_read=_env_flag(env("SINGLE_READ", "1")),
            log_level=env("LOG_LEVEL", "INFO"),
            log_format=env("LOG_FORMAT", "text"),
        )

    @property
    def sequential(self) -> bool:
        """True when connections are served on the accept thread."""
        return self.workers == 0

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < len(ROOT_GET_PREFIX):
            raise ValueError(
                f"buffer_size must be >= {len(ROOT_GET_PREFIX)} "
                f"to hold a request line"
            )

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0 (or None for no deadline)")

        if self.workers < 0:
            raise ValueError("workers must be >= 0")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Unknown log_format {self.log_format!r}, expected one of {LOG_FORMATS}"
            )
