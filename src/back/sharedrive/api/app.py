"""Application factory for sharedrive API."""
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.responses import FileResponse

from ..observability import get_logger, metrics_text
from ..observability.middleware import RequestContextMiddleware
from .config import APIConfig, load_config
from .errors import add_error_handlers
from .modules.files import FileService, create_file_router
from .modules.share import ShareLinkRegistry, ShareService, create_share_router
from .modules.upload import UploadPipeline, create_upload_router
from .paths import PathResolver
from .storage import LocalStorage, Storage

logger = get_logger(__name__)


def _mount_static(app: FastAPI, static_path: Path) -> None:
    """Serve the browser UI from static_path, falling back to index.html."""
    assets_path = static_path / 'assets'
    if assets_path.is_dir():
        app.mount('/assets', StaticFiles(directory=assets_path), name='assets')

    @app.get('/{full_path:path}', include_in_schema=False)
    async def spa_fallback(full_path: str):
        requested = (static_path / full_path).resolve()
        if full_path and requested.is_file() and requested.is_relative_to(static_path.resolve()):
            return FileResponse(requested)
        return FileResponse(static_path / 'index.html')


def create_app(
    config: APIConfig | None = None,
    storage: Storage | None = None,
    registry: ShareLinkRegistry | None = None,
) -> FastAPI:
    """Create a pre-wired FastAPI application.

    All dependencies are injectable for testing and customization.

    Args:
        config: API configuration. Defaults to ``load_config()`` (STORAGE_PATH env var).
        storage: Storage backend. Defaults to LocalStorage.
        registry: Share link registry. Defaults to a fresh, empty registry
            with the configured expiry window.

    Returns:
        Configured FastAPI application with all routes mounted.

    Example:
        config = APIConfig(storage_root=Path('/srv/files'))
        app = create_app(config)
    """
    config = config or load_config()

    # Fail fast on an unusable storage root
    try:
        config.validate_startup()
    except ValueError as e:
        logger.error('configuration_invalid', error=str(e))
        raise

    resolver = PathResolver(config.storage_root)
    storage = storage or LocalStorage()
    if registry is None:
        registry = ShareLinkRegistry(timedelta(hours=config.share_duration_hours))

    files = FileService(resolver, storage)
    uploads = UploadPipeline(resolver, storage)
    shares = ShareService(files, registry)

    app = FastAPI(
        title='sharedrive',
        description='Self-hosted file manager with time-limited share links',
        version='0.1.0',
    )
    app.state.config = config
    app.state.share_registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.add_middleware(RequestContextMiddleware)

    add_error_handlers(app)

    app.include_router(create_file_router(files))
    app.include_router(create_upload_router(uploads))
    app.include_router(create_share_router(shares, public_base_url=config.public_base_url))

    @app.get('/health')
    async def health():
        """Health check endpoint."""
        return {
            'status': 'ok',
            'storage_root': str(config.storage_root),
            'share_duration_hours': config.share_duration_hours,
        }

    @app.get('/metrics', include_in_schema=False)
    async def metrics():
        """Prometheus exposition."""
        body, content_type = metrics_text()
        return Response(content=body, media_type=content_type)

    if config.static_dir is not None:
        if config.static_dir.is_dir():
            _mount_static(app, config.static_dir)
        else:
            logger.warning('static_dir_missing', static_dir=str(config.static_dir))

    logger.info(
        'app_created',
        storage_root=str(config.storage_root),
        share_duration_hours=config.share_duration_hours,
    )
    return app
