"""
=============================================================================
CORE MODULE - Transport and Accept Loop
=============================================================================

    socket_server.py   Listening socket, accept loop, ShutdownController
    connection.py      Connected socket with line/byte I/O (client + server)

THREAD-PER-CONNECTION MODEL
───────────────────────────
Each accepted connection gets its own freshly spawned thread that runs the
session to completion and exits. There is no pool and no limit: simple to
follow, and fine for a file server that handles one request per connection.

=============================================================================
"""

from .socket_server import SocketServer, ShutdownController
from .connection import Connection, ConnectionState, IncompleteReadError

__all__ = [
    "SocketServer",         # Accept loop
    "ShutdownController",   # Shared stop flag (signals, "exit" requests)
    "Connection",           # Buffered socket wrapper
    "ConnectionState",      # Connection lifecycle states
    "IncompleteReadError",  # Stream ended before read_exact() was satisfied
]
