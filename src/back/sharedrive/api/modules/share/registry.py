"""In-process registry of time-limited share links.

Links live only as long as the process. Expiry is enforced lazily: an
expired link is deleted when it is looked up, and every lookup miss sweeps
all expired links out of the registry. No background task is involved.

The sweep is O(n) per miss, which is fine for the handful of links a
single-user file server holds; a heap keyed by ``created_at`` would replace
it for large registries.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable

from ....observability import get_logger
from ....observability.metrics import SHARE_LINKS_REMOVED
from ...config import SHARE_DURATION_HOURS
from ...errors import ShareExpiredError, ShareNotFoundError

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def format_hours(window: timedelta) -> str:
    hours = window / timedelta(hours=1)
    return str(int(hours)) if hours.is_integer() else f'{hours:g}'


@dataclass(frozen=True)
class ShareLink:
    """A public pointer to one file, valid for a fixed window after creation."""
    id: str
    target_path: str
    created_at: datetime

    def expires_at(self, window: timedelta) -> datetime:
        return self.created_at + window


class ShareLinkRegistry:
    """Thread-safe in-memory mapping of share id -> ShareLink.

    Time is read from ``clock`` unless an explicit ``now`` is passed, so
    tests can move past the expiry window without sleeping.
    """

    def __init__(
        self,
        expiry: timedelta = timedelta(hours=SHARE_DURATION_HOURS),
        *,
        clock: Callable[[], datetime] = _now,
        token_bytes: int = 16,
    ) -> None:
        self._links: dict[str, ShareLink] = {}
        self._lock = RLock()
        self._clock = clock
        self._token_bytes = token_bytes
        self.expiry = expiry

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def __contains__(self, share_id: object) -> bool:
        with self._lock:
            return share_id in self._links

    def _is_expired(self, link: ShareLink, now: datetime) -> bool:
        return now - link.created_at > self.expiry

    def create(self, target_path: str, *, now: datetime | None = None) -> ShareLink:
        """Register a new link to ``target_path`` (relative to the storage root).

        The caller has already checked that the target is an existing
        regular file; it is not re-checked until the link is accessed.
        """
        created_at = now if now is not None else self._clock()
        with self._lock:
            share_id = secrets.token_urlsafe(self._token_bytes)
            while share_id in self._links:
                share_id = secrets.token_urlsafe(self._token_bytes)
            link = ShareLink(id=share_id, target_path=target_path, created_at=created_at)
            self._links[share_id] = link

        logger.info(
            'share_created',
            share_id=share_id,
            path=target_path,
            expires_at=link.expires_at(self.expiry).isoformat(),
        )
        return link

    def lookup(self, share_id: str, *, now: datetime | None = None) -> ShareLink:
        """Return the live link for ``share_id``.

        Raises:
            ShareNotFoundError: Unknown id (after sweeping expired links)
            ShareExpiredError: The link existed but is past its window; it
                has been removed
        """
        now = now if now is not None else self._clock()
        with self._lock:
            link = self._links.get(share_id)
            if link is None:
                swept = self._sweep_locked(now)
                logger.info('share_not_found', share_id=share_id, swept=swept)
                raise ShareNotFoundError('Share link is invalid or has expired.')

            if self._is_expired(link, now):
                del self._links[share_id]
                SHARE_LINKS_REMOVED.labels(reason='expired').inc()
                logger.info(
                    'share_expired',
                    share_id=share_id,
                    created_at=link.created_at.isoformat(),
                    expired_at=link.expires_at(self.expiry).isoformat(),
                )
                raise ShareExpiredError(
                    f'Share link has expired (valid for {format_hours(self.expiry)} hour(s)).'
                )

            return link

    def remove(self, share_id: str, *, reason: str = 'revoked') -> bool:
        """Delete a link. Returns True if it was present."""
        with self._lock:
            link = self._links.pop(share_id, None)
        if link is None:
            return False
        SHARE_LINKS_REMOVED.labels(reason=reason).inc()
        logger.info('share_removed', share_id=share_id, reason=reason)
        return True

    def sweep(self, *, now: datetime | None = None) -> int:
        """Remove every expired link. Returns how many were removed."""
        now = now if now is not None else self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: datetime) -> int:
        expired = [sid for sid, link in self._links.items() if self._is_expired(link, now)]
        for sid in expired:
            del self._links[sid]
        if expired:
            SHARE_LINKS_REMOVED.labels(reason='swept').inc(len(expired))
            logger.info('share_links_swept', count=len(expired))
        return len(expired)
