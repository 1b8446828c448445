"""structlog setup for sharedrive.

Every log line is a snake_case event plus key/value context. Lines emitted
while a request is in flight carry its ``request_id``.

    configure_logging()              # once, at process start
    logger = get_logger(__name__)
    logger.info("share_created", share_id=share_id, path="docs/a.txt")

LOG_LEVEL picks the level (default INFO); LOG_FORMAT=json switches from the
console renderer to JSON lines.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Third-party loggers that are too chatty at INFO.
_QUIET_LOGGERS = ("uvicorn.access", "multipart", "PIL")

_configured = False


def _inject_request_id(logger, method_name: str, event_dict: dict) -> dict:
    rid = request_id_ctx.get()
    if rid is not None:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _renderer(fmt: str):
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(*, level: str | None = None, fmt: str | None = None) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Safe to call more than once; only the first call has an effect.

    Args:
        level: Level name, defaults to LOG_LEVEL or INFO.
        fmt: "json" or "console", defaults to LOG_FORMAT or "console".
    """
    global _configured
    if _configured:
        return
    _configured = True

    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    fmt = (fmt or os.environ.get("LOG_FORMAT") or "console").lower()

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        _inject_request_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            # Records from plain stdlib loggers (uvicorn, asyncio) get the
            # same context as structlog events.
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(fmt),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    level_value = getattr(logging, level_name, None)
    root.setLevel(level_value if isinstance(level_value, int) else logging.INFO)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
