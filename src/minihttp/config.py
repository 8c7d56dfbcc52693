"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── minihttp-server -p 3000 ./public                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=3000 minihttp-server                        │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The config is built once at startup and only read afterwards. Every
session thread shares the same instance, which is safe precisely because
nobody writes to it.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .http.response import DATE_STYLES


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    File server configuration.

    Usage:
        config = ServerConfig(document_root="./public", port=8080)
        config.validate()
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Directory from which files are served. Nothing outside it is ever
    returned. Defaults to the current working directory.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = ""
    """
    The IP address to bind to.
    - "" - All network interfaces
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port (tests).
    """

    backlog: int = 128
    """
    Maximum number of queued connections.
    When the accept queue is full, new connections are refused.
    """

    accept_timeout: float = 1.0
    """
    How long accept() blocks before the loop re-checks for shutdown.
    Session sockets themselves never time out.
    """

    # ─────────────────────────────────────────────────────────────────────
    # OPERATOR OUTPUT
    # ─────────────────────────────────────────────────────────────────────

    verbose_headers: bool = False
    """
    Echo every request header line to the console.
    """

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    date_style: str = "locale"
    """
    Format of the Date response header.
    - "locale" - local clock, the locale's date-time representation
    - "http"   - RFC 7231 HTTP-date in GMT
    """

    server_name: str = "MiniHTTP/1.0"
    """
    Name shown in the startup banner.
    """

    @property
    def root_path(self) -> Path:
        """Absolute, normalized document root."""
        return Path(self.document_root).resolve()

    @classmethod
    def from_env(cls, document_root: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTP_HOST        Bind address (default: all interfaces)
        MINIHTTP_PORT        Listen port (default: 8080)
        MINIHTTP_DOCROOT     Document root (default: current directory)
        MINIHTTP_VERBOSE     Echo request headers: 1/true/yes/on
        MINIHTTP_LOG_LEVEL   Logging level (default: INFO)
        MINIHTTP_DATE_STYLE  "locale" or "http" (default: locale)

        =====================================================================
        """
        return cls(
            document_root=document_root or os.getenv("MINIHTTP_DOCROOT", "."),
            host=os.getenv("MINIHTTP_HOST", ""),
            port=int(os.getenv("MINIHTTP_PORT", "8080")),
            verbose_headers=os.getenv("MINIHTTP_VERBOSE", "").lower() in _TRUTHY,
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
            date_style=os.getenv("MINIHTTP_DATE_STYLE", "locale"),
        )

    def validate(self) -> None:
        """
        Validate configuration values at startup (fail fast).

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not Path(self.document_root).is_dir():
            raise ValueError(f"Document root is not a directory: {self.document_root}")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.date_style not in DATE_STYLES:
            raise ValueError(f"date_style must be one of {DATE_STYLES}")
