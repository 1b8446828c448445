"""Storage abstraction for file operations."""
from __future__ import annotations

import os
import re
import shutil
import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

_DIGITS = re.compile(r'(\d+)')


def natural_sort_key(name: str) -> list[tuple[int, int, str]]:
    """Case- and accent-insensitive sort key that orders digit runs numerically.

    ``file2`` sorts before ``file10``; ``Apple`` and ``apple`` compare equal.
    """
    folded = unicodedata.normalize('NFKD', name)
    folded = ''.join(c for c in folded if not unicodedata.combining(c)).casefold()
    key = []
    for token in _DIGITS.split(folded):
        if not token:
            continue
        if token.isdigit():
            key.append((0, int(token), ''))
        else:
            key.append((1, 0, token))
    return key


@dataclass(frozen=True)
class DirEntry:
    """One child of a listed directory."""
    name: str
    is_dir: bool


class Storage(ABC):
    """Abstract storage interface.

    Implementations perform raw I/O at absolute paths that have already
    been validated by ``PathResolver``. They raise the builtin OSError
    subclasses (FileNotFoundError, FileExistsError, ...) and leave the
    mapping to HTTP semantics to the services.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Check if anything exists at path."""
        ...

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        ...

    @abstractmethod
    def is_file(self, path: Path) -> bool:
        """True for regular files only."""
        ...

    @abstractmethod
    def list_dir(self, path: Path) -> list[DirEntry]:
        """List directory contents, directories first then natural order."""
        ...

    @abstractmethod
    def make_dir(self, path: Path) -> None:
        """Create a directory and any missing ancestors."""
        ...

    @abstractmethod
    def ensure_dir(self, path: Path) -> None:
        """Create a directory unless it already exists."""
        ...

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Delete file or directory recursively."""
        ...

    @abstractmethod
    def move(self, src: Path, dest: Path) -> None:
        """Move src to the full target path dest."""
        ...

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Read file contents as UTF-8, line endings untouched."""
        ...

    @abstractmethod
    def write_text(self, path: Path, content: str) -> None:
        """Overwrite an existing file with UTF-8 content, written verbatim."""
        ...


class LocalStorage(Storage):
    """Local filesystem storage implementation."""

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def list_dir(self, path: Path) -> list[DirEntry]:
        entries = []
        with os.scandir(path) as it:
            for child in it:
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                entries.append(DirEntry(name=child.name, is_dir=is_dir))
        return sorted(entries, key=lambda e: (not e.is_dir, natural_sort_key(e.name)))

    def make_dir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=False)

    def ensure_dir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def delete(self, path: Path) -> None:
        if not os.path.lexists(path):
            raise FileNotFoundError(f'Path not found: {path}')
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    def move(self, src: Path, dest: Path) -> None:
        # rename(2) when on the same filesystem, copy + delete otherwise
        shutil.move(str(src), str(dest))

    def read_text(self, path: Path) -> str:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def write_text(self, path: Path, content: str) -> None:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
