"""
=============================================================================
CONNECTION WRAPPER
=============================================================================

Wraps a connected TCP socket (either side) with the small amount of
bookkeeping the demos need.

=============================================================================
ONE MESSAGE PER CONNECTION
=============================================================================

The demos measure how many bytes a single request and a single response
put on the wire. To keep the framing out of the measurement, every demo
exchange uses the simplest possible TCP pattern:

    Client                                   Server
      │                                        │
      │  connect() ──────────────────────────► │  accept()
      │                                        │
      │  sendall(request) ───────────────────► │  recv() ... recv()
      │  shutdown(SHUT_WR)  ── FIN ──────────► │  recv() == b""  (EOF)
      │                                        │
      │  recv() ... ◄──────────────────── sendall(response)
      │  recv() == b"" (EOF) ◄── FIN ──── shutdown(SHUT_WR)
      │                                        │
      │  close()                               │  close()

The half-close (SHUT_WR) tells the peer "that is the whole message" without
any Content-Length or length prefix, so byte counts seen in Wireshark are
exactly the message sizes the demo prints.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states (for logging and debugging)."""
    NEW = "new"                  # Just accepted / connected
    READING = "reading"          # Reading the peer's message
    WRITING = "writing"          # Sending our message
    HALF_CLOSED = "half_closed"  # We sent FIN, may still read
    CLOSING = "closing"          # Close sequence in progress
    CLOSED = "closed"            # Socket released


@dataclass
class Connection:
    """
    A connected TCP socket plus byte counters.

    Attributes:
        socket: The connected socket.
        address: Peer (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current lifecycle state.
        bytes_received: Total bytes read from the peer.
        bytes_sent: Total bytes written to the peer.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    bytes_received: int = 0
    bytes_sent: int = 0

    buffer_size: int = 64 * 1024
    timeout: Optional[float] = 5.0
    max_message_size: int = 1024 * 1024

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        timeout: Optional[float] = 5.0,
        buffer_size: int = 64 * 1024,
        max_message_size: int = 1024 * 1024,
    ) -> "Connection":
        """
        Open a client connection.

        Raises:
            OSError: If the server cannot be reached.
        """
        sock = socket.create_connection((host, port), timeout=timeout)
        # Small demo messages should leave immediately, not wait for Nagle
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        return cls(
            socket=sock,
            address=(host, port),
            timeout=timeout,
            buffer_size=buffer_size,
            max_message_size=max_message_size,
        )

    @property
    def peer(self) -> str:
        """Peer as "ip:port" for log lines."""
        return f"{self.address[0]}:{self.address[1]}"

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_to_eof(self) -> bytes:
        """
        Read until the peer half-closes its side of the connection.

        Returns:
            Everything the peer sent (may be empty).

        Raises:
            TimeoutError: If the peer stops sending without closing.
            ValueError: If the message exceeds max_message_size.
        """
        self.state = ConnectionState.READING
        chunks = []
        total = 0

        try:
            while True:
                chunk = self._recv()
                if not chunk:
                    break  # FIN from peer: message complete

                chunks.append(chunk)
                total += len(chunk)

                if total > self.max_message_size:
                    raise ValueError(f"Message too large: {total} bytes")
        except socket.timeout:
            raise TimeoutError(f"[{self.id}] Read timeout after {total} bytes")

        self.bytes_received += total
        return b"".join(chunks)

    def read_exact(self, size: int, allow_eof: bool = False) -> bytes:
        """
        Read exactly ``size`` bytes.

        With ``allow_eof`` a clean close before the first byte returns b""
        (the peer is done sending records); a close mid-record still raises.

        Raises:
            ConnectionError: If the peer closes first.
        """
        self.state = ConnectionState.READING
        data = b""
        while len(data) < size:
            chunk = self._recv(min(self.buffer_size, size - len(data)))
            if not chunk:
                if allow_eof and not data:
                    return b""
                raise ConnectionError(
                    f"[{self.id}] Peer closed after {len(data)} of {size} bytes"
                )
            data += chunk
        self.bytes_received += len(data)
        return data

    def _recv(self, size: Optional[int] = None) -> bytes:
        """recv() that treats an abrupt reset as EOF."""
        try:
            data = self.socket.recv(size or self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_all(self, data: bytes) -> bool:
        """
        Send all bytes.

        Returns:
            True if sent, False if the peer went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent += len(data)
        self.last_activity = time.time()
        return True

    def send_chunked(self, data: bytes, chunk_size: int) -> bool:
        """Send in fixed-size pieces (the payload demo shows 4 KB writes)."""
        for start in range(0, len(data), chunk_size):
            if not self.send_all(data[start:start + chunk_size]):
                return False
        return True

    def finish_sending(self) -> None:
        """Half-close: send FIN so the peer's read_to_eof() returns."""
        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone
        self.state = ConnectionState.HALF_CLOSED

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """Release the socket. Safe to call more than once."""
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING
        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed "
            f"(rx={self.bytes_received} tx={self.bytes_sent} age={self.age:.3f}s)"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
