"""Upload routes for sharedrive API."""
from fastapi import APIRouter, File, UploadFile

from ...errors import UploadFailedError
from .service import UploadPipeline


def create_upload_router(pipeline: UploadPipeline) -> APIRouter:
    """Create the multipart upload router.

    Args:
        pipeline: Upload pipeline bound to the storage root

    Returns:
        APIRouter with POST /api/upload/{subpath}
    """
    router = APIRouter(tags=['upload'])

    @router.post('/api/upload')
    @router.post('/api/upload/{subpath:path}')
    async def upload_file(subpath: str = '', file: UploadFile | None = File(None)):
        """Upload one file (multipart field ``file``) into subpath."""
        if file is None:
            raise UploadFailedError('File upload failed or was rejected.')
        try:
            result = await pipeline.accept(subpath, file)
        finally:
            await file.close()
        return {
            'message': f'File "{result.filename}" uploaded successfully to /{subpath}',
            'filename': result.filename,
            'path': result.path,
        }

    return router
