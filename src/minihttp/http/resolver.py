"""
=============================================================================
RESOURCE RESOLVER
=============================================================================

Maps a URL path onto a file under the document root and decides which
status the request gets.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

Without protection an attacker can climb out of the document root:

    GET /../../etc/passwd HTTP/1.0

    docroot:  /srv/www
    joined:   /srv/www/../../etc/passwd
    resolved: /etc/passwd                 ← outside! must be 403

The defense:

    1. Resolve the joined path (following "..", "." and symlinks)
    2. Resolve the document root the same way
    3. The resolved path must BE the root or have the root as an ancestor

Step 3 compares path segments, not strings. A plain substring test
("does '/srv/www2/secret' contain '/srv/www'?") would wrongly let a sibling
directory that shares a name prefix through.

=============================================================================
RESOLUTION RULES (in order)
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ 1. path does not start with "/"           → 400 Bad Request         │
    │ 2. resolve root + path                                               │
    │ 3. resolved path escapes the root         → 403 Forbidden           │
    │ 4. resolved path is a directory           → append "index.html"     │
    │ 5. missing, or hidden (".name")           → 404 Not Found           │
    │ 6. not a regular file, or not readable    → 403 Forbidden           │
    │ 7. otherwise                              → 200 OK + file contents  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .request import HTTPParseError
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


DEFAULT_DOCUMENT = "index.html"


@dataclass(frozen=True)
class ResolvedResource:
    """
    What the filesystem says about a requested path.

    Derived from a document root plus URL path, never mutated, and consumed
    immediately to pick a status.
    """

    absolute_path: str
    exists: bool = False
    is_directory: bool = False
    is_regular_file: bool = False
    is_readable: bool = False
    is_hidden: bool = False
    within_root: bool = False

    @property
    def status(self) -> HTTPStatus:
        """The status this resource earns (rules 3, 5, 6 and 7)."""
        if not self.within_root:
            return HTTPStatus.FORBIDDEN
        if not self.exists or self.is_hidden:
            return HTTPStatus.NOT_FOUND
        if not self.is_regular_file or not self.is_readable:
            return HTTPStatus.FORBIDDEN
        return HTTPStatus.OK

    @property
    def path(self) -> Path:
        return Path(self.absolute_path)


class ResourceResolver:
    """
    Resolves URL paths against a document root.

    Usage:
        resolver = ResourceResolver("/srv/www")
        status, body = resolver.lookup("/index.html")
    """

    def __init__(self, document_root: str, default_document: str = DEFAULT_DOCUMENT):
        """
        Args:
            document_root: Directory below which files may be served.
            default_document: File served for directory requests.
        """
        self.document_root = document_root
        self.default_document = default_document

        # Resolve to absolute path (important for the containment check)
        self.root = Path(document_root).resolve()

    def is_within_root(self, path: Path) -> bool:
        """True if ``path`` is the root itself or one of its descendants."""
        try:
            path.relative_to(self.root)
        except ValueError:
            return False
        return True

    def resolve(self, url_path: str) -> ResolvedResource:
        """
        Resolve a URL path to a ResolvedResource.

        Raises:
            HTTPParseError: The path does not start with "/" (rule 1). The
                            containment check never runs in that case.
                            Also raised (400) for a path the filesystem
                            cannot represent, such as one with a NUL byte.
        """
        if not url_path.startswith("/"):
            raise HTTPParseError(f"Path must start with '/': {url_path!r}")

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE FULL FILESYSTEM PATH
        # ─────────────────────────────────────────────────────────────────
        # Plain concatenation, like the URL says: root + "/a/../b"
        # resolve() follows symlinks and normalizes .. components
        try:
            full_path = Path(self.document_root + url_path).resolve()
        except ValueError as e:
            # "embedded null byte"
            raise HTTPParseError(f"Unusable path {url_path!r}: {e}") from e

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: PATH TRAVERSAL CHECK
        # ─────────────────────────────────────────────────────────────────
        if not self.is_within_root(full_path):
            logger.warning(f"Path traversal attempt: {url_path}")
            return ResolvedResource(absolute_path=str(full_path), within_root=False)

        # ─────────────────────────────────────────────────────────────────
        # DIRECTORY → DEFAULT DOCUMENT
        # ─────────────────────────────────────────────────────────────────
        # Any error while probing (e.g. ENAMETOOLONG) means "does not exist"
        try:
            if full_path.is_dir():
                full_path = full_path / self.default_document

            return ResolvedResource(
                absolute_path=str(full_path),
                exists=full_path.exists(),
                is_directory=full_path.is_dir(),
                is_regular_file=full_path.is_file(),
                is_readable=os.access(full_path, os.R_OK),
                is_hidden=full_path.name.startswith("."),
                within_root=True,
            )
        except OSError as e:
            logger.debug(f"Cannot inspect {full_path}: {e}")
            return ResolvedResource(absolute_path=str(full_path), within_root=True)

    def lookup(self, url_path: str) -> Tuple[HTTPStatus, Optional[bytes]]:
        """
        Pick the status for a GET of ``url_path`` and load the body.

        Returns:
            (status, body) where body is the file contents for 200 OK and
            None otherwise.
        """
        try:
            resource = self.resolve(url_path)
        except HTTPParseError as e:
            logger.debug(f"Rejected path: {e}")
            return e.status_code, None

        status = resource.status
        if status != HTTPStatus.OK:
            return status, None

        try:
            # Note: the whole file is held in memory
            return status, resource.path.read_bytes()
        except PermissionError:
            return HTTPStatus.FORBIDDEN, None
