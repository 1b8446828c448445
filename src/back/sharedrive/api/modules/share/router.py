"""Share link routes for sharedrive API."""
import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from .schemas import ShareRequest, ShareResponse
from .service import ShareService


def create_share_router(service: ShareService, public_base_url: str | None = None) -> APIRouter:
    """Create share link router.

    Args:
        service: Share service (registry + file access)
        public_base_url: Origin used in share URLs; defaults to the
            origin of the request that created the share

    Returns:
        APIRouter with POST /api/share and GET /share/{share_id}
    """
    router = APIRouter(tags=['share'])

    @router.post('/api/share', response_model=ShareResponse)
    async def create_share(body: ShareRequest, request: Request):
        """Create a time-limited public link to a file."""
        base_url = public_base_url or str(request.base_url)
        return await service.create_share(body.path, base_url)

    @router.get('/share/{share_id}')
    async def access_share(share_id: str):
        """Download the file behind a share link."""
        target = await asyncio.to_thread(service.serve, share_id)
        return FileResponse(target, filename=target.name)

    return router
