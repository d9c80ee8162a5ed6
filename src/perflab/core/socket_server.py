"""
=============================================================================
DEMO TCP SOCKET SERVER
=============================================================================

The listening half shared by every network demo. It owns the socket
lifecycle and hands each accepted connection to a demo-specific handler.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create the listening socket
    2. bind()      Reserve host:port (port 0 = let the OS pick)
    3. listen()    OS starts queueing incoming connections
    4. accept()    Wait for a client, returns a NEW socket for it
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    │   127.0.0.1:8888      │     Never sends/receives data
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                    ┌───────────────────────┐
                    │   Client Socket       │ ◄── One request, one response,
                    │   (Connection)        │     then closed
                    └───────────────────────┘

The demos are single-client teaching tools, so connections are handled
one at a time on the accept thread. There is no worker pool: a profiler
attached to the process sees exactly one request path at a time.

=============================================================================
RUNNING IN THE BACKGROUND
=============================================================================

The interactive console runs the client in the foreground and the server
on a daemon thread in the same process:

    main thread                        server thread
    ───────────                        ─────────────
    serve_in_background(handler) ───►  start(handler)
    wait_until_ready()           ◄───  bind + listen, ready.set()
    client round trips ...              accept loop ...
    shutdown()                   ───►  loop exits within 1s
    wait_for_shutdown()          ◄───  close socket, stopped.set()

Signal handlers can only be installed from the main thread, so start()
installs SIGINT/SIGTERM handlers only when it runs there.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import DemoConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP accept loop.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(handler)        Blocks until shutdown()                     │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, 1s timeout │
    │        ├──► bind() / listen()                                        │
    │        ├──► _setup_signals()   main thread only                      │
    │        ├──► _ready.set()                                             │
    │        └──► _accept_loop()     handler(conn) for each client         │
    │                                                                      │
    │    serve_in_background(handler)  start() on a daemon thread          │
    │                                                                      │
    │    shutdown()            _running = False                            │
    │    _cleanup()            restore signals, close socket, _stopped.set │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle(conn: Connection):
            data = conn.read_to_eof()
            conn.send_all(b"...")

        server = SocketServer(config)
        server.serve_in_background(handle)
        server.wait_until_ready()
        ...
        server.shutdown()
    """

    def __init__(self, config: DemoConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False

        # Set once bind()/listen() succeeded (or failed, see _start_error)
        self._ready = threading.Event()
        # Set once the listening socket is closed
        self._stopped = threading.Event()
        self._start_error: Optional[BaseException] = None

        self._bound_address: Optional[Tuple[str, int]] = None
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if the accept loop is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port 0 this is the port the OS actually assigned, which is
        only known after bind().
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting the demo between lecture slides must not hit
        # "Address already in use" while the old socket sits in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up every second to check the running flag
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers that trigger shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until shutdown() is called.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._stopped.clear()
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._start_error = e
            self._socket.close()
            self._socket = None
            self._ready.set()
            self._stopped.set()
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def serve_in_background(self, connection_handler: Callable[[Connection], None]) -> threading.Thread:
        """
        Run start() on a daemon thread and return the thread.

        Call wait_until_ready() before connecting.
        """
        self._ready.clear()
        self._start_error = None

        def run():
            try:
                self.start(connection_handler)
            except OSError:
                # Already logged; surfaced to the caller by wait_until_ready()
                return

        self._thread = threading.Thread(target=run, name="perflab-server", daemon=True)
        self._thread.start()
        return self._thread

    def wait_until_ready(self, timeout: Optional[float] = 5.0) -> Tuple[str, int]:
        """
        Block until the server is listening.

        Returns:
            The bound (host, port).

        Raises:
            OSError: If bind() failed in the server thread.
            TimeoutError: If the server did not come up in time.
        """
        if not self._ready.wait(timeout):
            raise TimeoutError("Server did not start listening in time")
        if self._start_error is not None:
            raise self._start_error
        return self.address

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept clients until shutdown.

        A failing handler is logged and the loop keeps going; one bad
        connection never takes the demo server down.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_message_size=self.config.max_message_size,
            )

            try:
                with conn:
                    connection_handler(conn)
            except Exception:
                logger.exception(f"[{conn.id}] Unhandled error for {conn.peer}")

    def shutdown(self):
        """
        Stop accepting connections. Safe to call more than once and from
        any thread; the loop notices within one accept() timeout.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signals and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._stopped.set()
        logger.info("Socket server stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the listening socket to close.

        Returns:
            True if the server stopped, False on timeout.
        """
        return self._stopped.wait(timeout)
