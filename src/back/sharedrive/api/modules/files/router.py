"""File operation routes for sharedrive API."""
import asyncio

from fastapi import APIRouter
from fastapi.responses import FileResponse

from .schemas import BrowseResponse, DeleteRequest, MkdirRequest, MoveRequest, SaveRequest
from .service import FileService


def create_file_router(service: FileService) -> APIRouter:
    """Create file operations router.

    Args:
        service: File service bound to the storage root

    Returns:
        Configured APIRouter with browse, download, edit and tree-mutation endpoints
    """
    router = APIRouter(tags=['files'])

    @router.get('/api/browse', response_model=BrowseResponse)
    @router.get('/api/browse/{subpath:path}', response_model=BrowseResponse)
    async def browse(subpath: str = ''):
        """List directory contents."""
        return await asyncio.to_thread(service.list_directory, subpath)

    @router.get('/download/{filepath:path}')
    async def download(filepath: str):
        """Stream a file as an attachment.

        Errors raised once the body has started streaming are handled by
        Starlette; no second response is sent.
        """
        target = await asyncio.to_thread(service.download_target, filepath)
        return FileResponse(target, filename=target.name)

    @router.get('/api/read/{filepath:path}')
    async def read_file(filepath: str):
        """Read a text file for the editor."""
        return await asyncio.to_thread(service.read_file, filepath)

    @router.post('/api/mkdir')
    async def make_directory(body: MkdirRequest):
        """Create a directory inside parent_path."""
        return await asyncio.to_thread(service.make_directory, body.parent_path, body.dir_name)

    @router.post('/api/delete')
    async def delete_item(body: DeleteRequest):
        """Delete a file or directory (recursively, permanently)."""
        return await asyncio.to_thread(service.delete, body.path)

    @router.post('/api/move')
    async def move_item(body: MoveRequest):
        """Move an item into destinationPath.

        Args:
            body: Request with sourcePath and destinationPath ('' for root)

        Returns:
            dict with message and new path
        """
        return await asyncio.to_thread(service.move, body.source_path, body.destination_path)

    @router.post('/api/save')
    async def save_file(body: SaveRequest):
        """Overwrite the content of an existing file."""
        return await asyncio.to_thread(service.save_file, body.file_path, body.content)

    return router
