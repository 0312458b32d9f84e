"""
=============================================================================
CONTENT SERVER
=============================================================================

Ties the components together:

    Listener ──► Connection ──► read ──► classify ──► resolve ──► write ──► close

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. ACCEPT
       └── Listener.accept_all() yields a Connection
           (failed accepts are logged and skipped)

    2. DISPATCH
       └── workers=0:  handled right here, on the accept thread
       └── workers>0:  queued for the ThreadPool (bounded)

    3. READ
       └── one bounded read (single_read) or read until the blank line

    4. CLASSIFY
       └── "GET / HTTP/1.1\\r\\n" prefix → ROOT_GET, anything else (even no bytes) → OTHER

    5. RESOLVE
       └── ROOT_GET → success page, OTHER → not-found page, read from disk

    6. WRITE
       └── status line + Content-Length + body, sent in one sendall()

    7. CLOSE
       └── always, whatever happened in 3-6

=============================================================================
FAILURE ISOLATION
=============================================================================

Steps 3, 5 and 6 can fail. Each failure is a ConnectionFailure: it is
logged, the connection is closed without a response, and the accept loop
never sees it. Only BindError (at startup) escapes run().

=============================================================================
"""

import logging
import signal
import threading
from typing import Optional, Tuple

from .accesslog import AccessLogger
from .config import ServerConfig
from .core import Connection, ConnectionState, Listener, ThreadPool
from .errors import ConnectionFailure, ResourceError
from .handlers import ResourceResolver
from .http import HTTPResponse, classify, request_line, write_response


logger = logging.getLogger(__name__)


class ContentServer:
    """
    Two-page HTTP/1.1 content server.

    Usage:
        server = ContentServer(ServerConfig(port=7878, document_root="./pages"))
        server.run()   # blocks until Ctrl+C / SIGTERM / shutdown()

    Running in a background thread (tests, embedding):
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(timeout=5.0)
        host, port = server.address
        ...
        server.shutdown()
        thread.join()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._listener = Listener(self.config)
        self._resolver = ResourceResolver.from_config(self.config)
        self._access_log = AccessLogger(log_format=self.config.log_format)

        self._thread_pool: Optional[ThreadPool] = None
        if not self.config.sequential:
            self._thread_pool = ThreadPool(
                workers=self.config.workers,
                queue_size=self.config.queue_size,
            )

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), with the real port once bound."""
        return self._listener.address

    @property
    def resolver(self) -> ResourceResolver:
        return self._resolver

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound."""
        return self._listener.wait_until_ready(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, configure_logging: bool = True):
        """
        Bind and serve until shutdown (blocking).

        Args:
            configure_logging: Install a basic root logging configuration
                               from config.log_level.

        Raises:
            BindError: If the address can't be bound. Nothing is served.
        """
        if configure_logging:
            self._setup_logging()

        self._listener.bind()

        if self._thread_pool is not None:
            self._thread_pool.start()
            mode = f"{self.config.workers} workers"
        else:
            mode = "sequential"

        host, port = self.address
        logger.info(
            f"Serving {self.config.document_root} on http://{host}:{port} ({mode})"
        )

        self._setup_signals()
        try:
            for conn in self._listener.accept_all():
                self._dispatch(conn)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._restore_signals()
            self._stop_workers()

    def shutdown(self):
        """Stop accepting connections. Safe to call from any thread."""
        self._listener.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("contentserver").setLevel(level)

    def _setup_signals(self):
        """
        Turn SIGINT/SIGTERM into shutdown().

        signal.signal() only works on the main thread; when the server runs
        anywhere else, the embedding code is responsible for shutdown().
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def _stop_workers(self):
        if self._thread_pool is not None:
            self._thread_pool.shutdown(wait=True, timeout=self.config.timeout)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _dispatch(self, conn: Connection):
        """Serve a connection now, or queue it for a worker."""
        if self._thread_pool is None:
            self.handle_connection(conn)
            return

        submitted = self._thread_pool.submit(
            self.handle_connection,
            args=(conn,),
            queue_timeout=self.config.queue_timeout,
        )
        if not submitted:
            logger.warning(f"[{conn.id}] Worker queue full, dropping connection")
            conn.close()

    def handle_connection(self, conn: Connection) -> Optional[HTTPResponse]:
        """
        Run one full request/response cycle and close the connection.

        Returns:
            The response sent, or None if the connection was abandoned.
        """
        with conn:
            try:
                data = self._read_request(conn)
                if not data:
                    logger.debug(f"[{conn.id}] Empty request")

                conn.state = ConnectionState.PROCESSING
                shape = classify(data)
                resource = self._resolver.resolve(shape)
                response = write_response(conn, resource)

            except ResourceError as e:
                logger.error(f"[{conn.id}] {e}; closing without response")
                return None

            except ConnectionFailure as e:
                logger.warning(f"[{conn.id}] {type(e).__name__}: {e}")
                return None

            self._access_log.log(
                request_id=conn.id,
                request_line=request_line(data),
                client_ip=conn.client_ip,
                status_code=response.status,
                content_length=response.content_length,
                duration_ms=conn.age * 1000,
            )
            return response

    def _read_request(self, conn: Connection) -> bytes:
        if self.config.single_read:
            buffer = bytearray(self.config.buffer_size)
            count = conn.read_into(buffer)
            return bytes(buffer[:count])
        return conn.read_request()
