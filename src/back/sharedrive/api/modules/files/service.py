"""File operations service for sharedrive API."""
import os
import re
from pathlib import Path

from ....observability import get_logger
from ...errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotADirectoryPathError,
    NotAFilePathError,
    PathNotFoundError,
    upstream_io_error,
)
from ...paths import PathResolver
from ...storage import Storage

logger = get_logger(__name__)

# Characters that are illegal (or unsafe) in a single path component.
_ILLEGAL_NAME_CHARS = re.compile(r'[/\\?%*:|"<>\x00-\x1f]')


def sanitize_name(name: str) -> str:
    """Replace characters that are illegal in file names with '_'."""
    return _ILLEGAL_NAME_CHARS.sub('_', name)


def is_reserved_name(name: str) -> bool:
    """True for names that cannot denote a new entry ('', '.', '..', '...')."""
    return not name.strip(' .')


class FileService:
    """Service class for file operations.

    Every public method resolves its paths through the PathResolver first
    and raises a FileManagerError subclass on failure. Methods are
    blocking; routers run them in a worker thread.
    """

    def __init__(self, resolver: PathResolver, storage: Storage):
        """Initialize the file service.

        Args:
            resolver: Sandboxing resolver bound to the storage root
            storage: Storage backend
        """
        self.resolver = resolver
        self.storage = storage

    def require_file(self, resolved: Path, path: str, *, missing: str = 'File not found.') -> Path:
        """Ensure ``resolved`` exists and is a regular file."""
        if not self.storage.exists(resolved):
            raise PathNotFoundError(missing, path=path)
        if not self.storage.is_file(resolved):
            raise NotAFilePathError('Path is not a file.', path=path)
        return resolved

    def list_directory(self, path: str = '') -> dict:
        """List directory contents.

        Args:
            path: Directory path relative to the storage root ('' for root)

        Returns:
            dict with current_path, parent_path and items
        """
        resolved = self.resolver.resolve(path)
        if not self.storage.exists(resolved):
            raise PathNotFoundError('Path not found', details=path, path=path)
        if not self.storage.is_dir(resolved):
            raise NotADirectoryPathError('Path is not a directory', details=path, path=path)

        try:
            entries = self.storage.list_dir(resolved)
        except OSError as e:
            raise upstream_io_error('Error listing files', e, path=path)

        base = self.resolver.relative(resolved)
        items = [
            {
                'name': entry.name,
                'is_dir': entry.is_dir,
                'path': f'{base}/{entry.name}' if base else entry.name,
            }
            for entry in entries
        ]

        parent_path = None
        if not self.resolver.is_root(resolved):
            parent_path = self.resolver.relative(resolved.parent)

        return {
            'current_path': path or '',
            'parent_path': parent_path,
            'items': items,
        }

    def make_directory(self, parent_path: str | None, dir_name: str | None) -> dict:
        """Create ``dir_name`` inside ``parent_path``.

        Raises:
            InvalidRequestError: Missing or unusable name, or bad parent
            ConflictError: Something already exists at the target
        """
        if not dir_name:
            raise InvalidRequestError('Directory name is required.')
        safe_name = sanitize_name(dir_name)
        if is_reserved_name(safe_name):
            raise InvalidRequestError('Invalid directory name provided.', details=dir_name)

        parent = self.resolver.resolve(parent_path or '')
        if not self.storage.exists(parent) or not self.storage.is_dir(parent):
            raise InvalidRequestError('Invalid or non-existent parent path.', path=parent_path)

        target = parent / safe_name
        if self.storage.exists(target):
            raise ConflictError(f"Directory or file '{safe_name}' already exists.", path=parent_path)

        try:
            self.storage.make_dir(target)
        except FileExistsError:
            raise ConflictError(f"Directory or file '{safe_name}' already exists.", path=parent_path)
        except OSError as e:
            raise upstream_io_error('Could not create directory', e, path=parent_path)

        rel_target = self.resolver.relative(target)
        logger.info('directory_created', path=rel_target)
        return {
            'message': f"Directory '{safe_name}' created successfully in /{self.resolver.relative(parent)}",
            'path': rel_target,
        }

    def delete(self, path: str) -> dict:
        """Delete a file, or a directory and everything beneath it.

        Raises:
            ForbiddenError: If path is the storage root
            PathNotFoundError: If nothing exists at path
        """
        resolved = self.resolver.resolve(path)
        if self.resolver.is_root(resolved):
            logger.warning('root_delete_blocked', path=path)
            raise ForbiddenError('Cannot delete the root storage directory', path=path)
        if not self.storage.exists(resolved):
            raise PathNotFoundError('Item not found.', path=path)

        try:
            self.storage.delete(resolved)
        except FileNotFoundError:
            raise PathNotFoundError('Item not found.', path=path)
        except OSError as e:
            raise upstream_io_error('Could not delete item', e, path=path)

        logger.info('item_deleted', path=self.resolver.relative(resolved))
        return {'message': f"Item '{resolved.name}' deleted successfully"}

    def move(self, source_path: str, destination_path: str) -> dict:
        """Move an item into another directory.

        Args:
            source_path: Item to move
            destination_path: Directory to move it into ('' for root)

        Returns:
            dict with message and the item's new relative path
        """
        if not source_path:
            raise InvalidRequestError('Missing source or destination path')

        src = self.resolver.resolve(source_path)
        dest_dir = self.resolver.resolve(destination_path or '')
        if self.resolver.is_root(src):
            raise InvalidRequestError('Cannot move the root storage directory', path=source_path)

        if not self.storage.exists(src):
            raise PathNotFoundError(f'Source item not found: {source_path}', path=source_path)
        if not self.storage.exists(dest_dir):
            raise PathNotFoundError(
                f'Destination directory not found: {destination_path}', path=destination_path,
            )
        if not self.storage.is_dir(dest_dir):
            raise NotADirectoryPathError(
                f'Destination is not a directory: {destination_path}', path=destination_path,
            )

        item_name = src.name
        final = dest_dir / item_name

        # Compare physical locations: the destination may be reached through
        # a symlink. The source itself is not followed, a symlink moves as a link.
        real_src = os.path.join(os.path.realpath(src.parent), item_name)
        real_dest = os.path.realpath(dest_dir)
        real_final = os.path.join(real_dest, item_name)
        if real_final == real_src or real_src == real_dest:
            raise InvalidRequestError('Cannot move item to the same location or into itself')
        if (
            self.storage.is_dir(src)
            and not os.path.islink(src)
            and real_final.startswith(real_src + os.sep)
        ):
            raise InvalidRequestError('Cannot move a folder into itself or one of its subdirectories.')
        if self.storage.exists(final):
            raise ConflictError(f"An item named '{item_name}' already exists in the destination.")

        try:
            self.storage.move(src, final)
        except OSError as e:
            raise upstream_io_error('Failed to move item', e, path=source_path)

        rel_final = self.resolver.relative(final)
        logger.info('item_moved', source=self.resolver.relative(src), destination=rel_final)
        return {
            'message': f"Successfully moved '{item_name}' to /{self.resolver.relative(dest_dir)}",
            'path': rel_final,
        }

    def read_file(self, path: str) -> dict:
        """Read a text file for editing."""
        resolved = self.require_file(self.resolver.resolve(path), path, missing=f'File not found: {path}')
        try:
            content = self.storage.read_text(resolved)
        except UnicodeDecodeError:
            raise InvalidRequestError('File is not valid UTF-8 text.', path=path)
        except OSError as e:
            raise upstream_io_error('Failed to read file', e, path=path)
        return {'path': path, 'content': content}

    def save_file(self, path: str, content: str) -> dict:
        """Overwrite an existing regular file. Never creates files."""
        resolved = self.resolver.resolve(path)
        if not self.storage.exists(resolved):
            raise PathNotFoundError(f'File not found: {path}', path=path)
        if not self.storage.is_file(resolved):
            raise NotAFilePathError('Target path is not a file.', path=path)

        try:
            self.storage.write_text(resolved, content)
        except OSError as e:
            raise upstream_io_error('Failed to save file', e, path=path)

        logger.info('file_saved', path=self.resolver.relative(resolved), chars=len(content))
        return {'message': f"File '{resolved.name}' saved successfully."}

    def download_target(self, path: str) -> Path:
        """Resolve a path that is about to be streamed to the client."""
        return self.require_file(self.resolver.resolve(path), path)
