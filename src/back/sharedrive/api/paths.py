"""Path sandboxing for the storage root.

Every client-supplied path goes through ``PathResolver.resolve`` before it
touches the file system. A resolved path is either the storage root itself
or lies strictly beneath it; anything else raises ``InvalidPathError``.
"""
from __future__ import annotations

import os
import re
from pathlib import Path
from urllib.parse import unquote

from ..observability import get_logger
from .errors import InvalidPathError

logger = get_logger(__name__)

# A '%' that does not start a two-digit hex escape.
_MALFORMED_ESCAPE = re.compile(r'%(?![0-9A-Fa-f]{2})')


def decode_path(raw: str) -> str:
    """Percent-decode a client path.

    Raises:
        InvalidPathError: On malformed escapes, invalid UTF-8 or NUL bytes.
    """
    if _MALFORMED_ESCAPE.search(raw):
        raise InvalidPathError('Invalid path', details='Malformed percent-encoding', path=raw)
    try:
        decoded = unquote(raw, encoding='utf-8', errors='strict')
    except UnicodeDecodeError:
        raise InvalidPathError('Invalid path', details='Path is not valid UTF-8', path=raw)
    if '\x00' in decoded:
        raise InvalidPathError('Invalid path', details='Path contains a NUL byte', path=raw)
    return decoded


class PathResolver:
    """Resolves relative paths against a fixed storage root.

    The containment check is lexical (after normalizing ``.`` and ``..``)
    and is then repeated on the real path, so a symlink under the root that
    points outside of it is rejected as well.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()
        self._root_str = str(self.root)
        self._prefix = self._root_str.rstrip(os.sep) + os.sep

    def _contained(self, candidate: str) -> bool:
        return candidate == self._root_str or candidate.startswith(self._prefix)

    def resolve(self, suffix: str | None = '') -> Path:
        """Validate ``suffix`` and return the absolute path it names.

        Args:
            suffix: Path relative to the storage root; empty means the root.

        Returns:
            Absolute path equal to or beneath the storage root.

        Raises:
            InvalidPathError: If the path cannot be decoded or escapes the root.
        """
        raw = suffix or ''
        decoded = decode_path(raw)
        candidate = os.path.normpath(os.path.join(self._root_str, decoded))

        if not self._contained(candidate):
            logger.warning('unsafe_path_rejected', path=raw, reason='outside_root')
            raise InvalidPathError('Invalid path', details='Path escapes the storage root', path=raw)

        if not self._contained(os.path.realpath(candidate)):
            logger.warning('unsafe_path_rejected', path=raw, reason='symlink_outside_root')
            raise InvalidPathError('Invalid path', details='Path escapes the storage root', path=raw)

        return Path(candidate)

    def is_root(self, resolved: Path) -> bool:
        return str(resolved) == self._root_str

    def relative(self, resolved: Path) -> str:
        """Return ``resolved`` relative to the root, POSIX style ('' for root)."""
        rel = Path(resolved).relative_to(self.root).as_posix()
        return '' if rel == '.' else rel
