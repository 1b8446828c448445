"""Run sharedrive as a standalone HTTP server.

Usage:
    STORAGE_PATH=/srv/files PORT=5000 python -m sharedrive
"""

import sys

import uvicorn

from .api import ConfigValidationError, create_app, load_config
from .observability import configure_logging, get_logger

logger = get_logger(__name__)


def main() -> int:
    configure_logging()
    try:
        config = load_config()
        app = create_app(config)
    except ConfigValidationError as exc:
        logger.error('startup_failed', error=str(exc))
        return 1

    logger.info(
        'server_starting',
        url=f'http://{config.host}:{config.port}',
        storage_root=str(config.storage_root),
        share_duration_hours=config.share_duration_hours,
    )
    logger.warning(
        'server_limitations',
        authentication='none',
        deletion='permanent',
        share_links='in-memory, reset on restart',
    )

    uvicorn.run(app, host=config.host, port=config.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
