"""Share link creation and access."""
from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

from ....observability import get_logger
from ....observability.metrics import SHARE_LINKS_CREATED, SHARE_LINKS_SERVED
from ...errors import (
    InvalidPathError,
    InvalidRequestError,
    NotAFilePathError,
    PathNotFoundError,
    ShareNotFoundError,
)
from ..files import FileService
from .qr import qr_code_data_url
from .registry import ShareLinkRegistry

logger = get_logger(__name__)


class ShareService:
    """Creates share links for files and serves the files behind them.

    The stored target is re-resolved and re-checked on every access; a link
    whose target has become unsafe, vanished, or is no longer a regular
    file is deleted from the registry.
    """

    def __init__(self, files: FileService, registry: ShareLinkRegistry):
        self.files = files
        self.registry = registry

    def register(self, path: str) -> str:
        """Validate ``path`` as a shareable file and return the new share id."""
        if not path:
            raise InvalidRequestError("Missing 'path' in request")
        resolved = self.files.resolver.resolve(path)
        if not self.files.storage.exists(resolved):
            raise PathNotFoundError('File not found for sharing.', path=path)
        if not self.files.storage.is_file(resolved):
            raise NotAFilePathError('Sharing is only supported for files.', path=path)
        link = self.registry.create(path)
        SHARE_LINKS_CREATED.inc()
        return link.id

    async def create_share(self, path: str, base_url: str) -> dict:
        """Create a share link and its QR code.

        Args:
            path: File path relative to the storage root
            base_url: Public origin the share URL is built on

        Returns:
            dict with share_id, share_url and qr_code_data_url (None when
            the QR code could not be rendered)
        """
        share_id = await asyncio.to_thread(self.register, path)
        share_url = f"{base_url.rstrip('/')}/share/{share_id}"
        return {
            'share_id': share_id,
            'share_url': share_url,
            'qr_code_data_url': await self._qr_code(share_id, share_url),
        }

    async def _qr_code(self, share_id: str, share_url: str) -> str | None:
        try:
            return await asyncio.to_thread(qr_code_data_url, share_url)
        except Exception:
            # The share itself is already usable without a QR code.
            logger.exception('qr_code_generation_failed', share_id=share_id)
            return None

    def serve(self, share_id: str, *, now: datetime | None = None) -> Path:
        """Return the absolute path of the file behind ``share_id``.

        Raises:
            ShareNotFoundError: Unknown id, or the target is unsafe, missing
                or not a regular file (the link is deleted in those cases)
            ShareExpiredError: The link is past its window
        """
        link = self.registry.lookup(share_id, now=now)

        try:
            resolved = self.files.resolver.resolve(link.target_path)
        except InvalidPathError:
            logger.error('share_target_invalid', share_id=share_id, path=link.target_path)
            self.registry.remove(share_id, reason='invalid_path')
            raise ShareNotFoundError('Shared file path is invalid.')

        storage = self.files.storage
        if not storage.exists(resolved):
            logger.warning('share_target_missing', share_id=share_id, path=link.target_path)
            self.registry.remove(share_id, reason='target_missing')
            raise ShareNotFoundError('The shared file is no longer available.')
        if not storage.is_file(resolved):
            logger.warning('share_target_not_file', share_id=share_id, path=link.target_path)
            self.registry.remove(share_id, reason='target_not_file')
            raise ShareNotFoundError('The shared item is not a file.')

        SHARE_LINKS_SERVED.inc()
        logger.info('share_served', share_id=share_id, filename=resolved.name)
        return resolved
