"""Share module for sharedrive API.

Time-limited public links to single files, with QR codes.
"""
from .registry import ShareLink, ShareLinkRegistry
from .router import create_share_router
from .schemas import ShareRequest, ShareResponse
from .service import ShareService

__all__ = [
    'create_share_router',
    'ShareLink',
    'ShareLinkRegistry',
    'ShareRequest',
    'ShareResponse',
    'ShareService',
]
