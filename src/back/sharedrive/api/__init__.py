"""FastAPI routers and utilities for the sharedrive backend.

Example:
    # Simple usage with create_app() (reads STORAGE_PATH)
    from sharedrive.api import create_app
    app = create_app()

    # Custom configuration
    from pathlib import Path
    from sharedrive.api import create_app, APIConfig
    app = create_app(APIConfig(storage_root=Path('/srv/files')))

    # Compose routers manually
    from fastapi import FastAPI
    from sharedrive.api import (
        APIConfig, FileService, LocalStorage, PathResolver, create_file_router,
    )
    config = APIConfig(storage_root=Path('/srv/files'))
    files = FileService(PathResolver(config.storage_root), LocalStorage())
    app = FastAPI()
    app.include_router(create_file_router(files))
"""

# Configuration
from .config import APIConfig, ConfigValidationError, SHARE_DURATION_HOURS, load_config

# Errors
from .errors import (
    ConflictError,
    FileManagerError,
    ForbiddenError,
    InvalidPathError,
    InvalidRequestError,
    NotADirectoryPathError,
    NotAFilePathError,
    PathNotFoundError,
    ShareExpiredError,
    ShareNotFoundError,
    UploadFailedError,
    UpstreamIOError,
)

# Paths and storage
from .paths import PathResolver
from .storage import Storage, LocalStorage

# Services and router factories
from .modules.files import FileService, create_file_router
from .modules.upload import UploadPipeline, create_upload_router
from .modules.share import ShareLink, ShareLinkRegistry, ShareService, create_share_router

# App factory
from .app import create_app

__all__ = [
    # Configuration
    'APIConfig',
    'ConfigValidationError',
    'SHARE_DURATION_HOURS',
    'load_config',
    # Errors
    'ConflictError',
    'FileManagerError',
    'ForbiddenError',
    'InvalidPathError',
    'InvalidRequestError',
    'NotADirectoryPathError',
    'NotAFilePathError',
    'PathNotFoundError',
    'ShareExpiredError',
    'ShareNotFoundError',
    'UploadFailedError',
    'UpstreamIOError',
    # Paths and storage
    'PathResolver',
    'Storage',
    'LocalStorage',
    # Services and routers
    'FileService',
    'create_file_router',
    'UploadPipeline',
    'create_upload_router',
    'ShareLink',
    'ShareLinkRegistry',
    'ShareService',
    'create_share_router',
    # App factory
    'create_app',
]
