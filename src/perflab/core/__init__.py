"""
=============================================================================
SOCKET PLUMBING
=============================================================================

Shared by the header and payload demos:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ SocketServer   bind/listen/accept loop, optional background thread  │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ one Connection per client
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ Connection     read_to_eof / send_all / finish_sending / close      │
    └─────────────────────────────────────────────────────────────────────┘

Clients use Connection.connect() for the other end of the same pattern.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
