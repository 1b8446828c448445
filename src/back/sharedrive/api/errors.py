"""Typed error hierarchy for file and share operations.

Every error carries the HTTP status it maps to, a human-readable message
and an optional ``details`` string. Services raise them; a single exception
handler installed by ``create_app`` renders them as
``{"error": ..., "details": ...}``.
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..observability import get_logger

logger = get_logger(__name__)


class FileManagerError(Exception):
    """Base error for all file manager operations."""

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        details: str | None = None,
        path: str | None = None,
    ):
        self.message = message
        self.details = details
        self.path = path
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [f"{type(self).__name__}({self.message!r}"]
        if self.path is not None:
            parts.append(f"path={self.path!r}")
        if self.details:
            parts.append(f"details={self.details!r}")
        return ", ".join(parts) + ")"

    def to_dict(self) -> dict[str, str]:
        """Convert to the JSON error body."""
        body = {'error': self.message}
        if self.details:
            body['details'] = self.details
        return body


class InvalidPathError(FileManagerError):
    """Path failed the sandbox check or could not be decoded."""

    status_code = 400


class InvalidRequestError(FileManagerError):
    """Request is well-formed but asks for something that cannot be done."""

    status_code = 400


class PathNotFoundError(FileManagerError):
    """Nothing exists at the requested path."""

    status_code = 404


class NotADirectoryPathError(FileManagerError):
    """A directory was required but the path is something else."""

    status_code = 400


class NotAFilePathError(FileManagerError):
    """A regular file was required but the path is something else."""

    status_code = 400


class ConflictError(FileManagerError):
    """An entry already exists where a new one would be created."""

    status_code = 409


class ForbiddenError(FileManagerError):
    """Operation is never allowed, e.g. deleting the storage root."""

    status_code = 403


class UpstreamIOError(FileManagerError):
    """The underlying file system call failed (permissions, I/O, ...)."""

    status_code = 500


class UploadFailedError(FileManagerError):
    """An upload could not be stored."""

    status_code = 400


class ShareNotFoundError(FileManagerError):
    """Share id is unknown, or its target is gone."""

    status_code = 404


class ShareExpiredError(FileManagerError):
    """Share id existed but is older than the expiry window."""

    status_code = 410


def upstream_io_error(action: str, exc: OSError, *, path: str | None = None) -> UpstreamIOError:
    """Wrap an unexpected OSError raised while performing ``action``."""
    return UpstreamIOError(action, details=exc.strerror or str(exc), path=path)


def add_error_handlers(app: FastAPI) -> None:
    """Render FileManagerError and request validation failures as JSON."""

    @app.exception_handler(FileManagerError)
    async def _file_manager_error(request: Request, exc: FileManagerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                'operation_failed',
                error=exc.message,
                details=exc.details,
                path=exc.path,
                url_path=request.url.path,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = []
        for err in exc.errors():
            location = '.'.join(str(part) for part in err.get('loc', ()) if part != 'body')
            problems.append(f"{location}: {err.get('msg', 'invalid')}" if location else err.get('msg', 'invalid'))
        return JSONResponse(
            status_code=400,
            content={'error': 'Invalid request', 'details': '; '.join(problems)},
        )
