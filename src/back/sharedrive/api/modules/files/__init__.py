"""Files module for sharedrive API.

Provides file system operations: browse, download, read, save, mkdir,
delete, move.
"""
from .router import create_file_router
from .schemas import BrowseResponse, DeleteRequest, MkdirRequest, MoveRequest, SaveRequest
from .service import FileService, is_reserved_name, sanitize_name

__all__ = [
    'create_file_router',
    'BrowseResponse',
    'DeleteRequest',
    'MkdirRequest',
    'MoveRequest',
    'SaveRequest',
    'FileService',
    'is_reserved_name',
    'sanitize_name',
]
