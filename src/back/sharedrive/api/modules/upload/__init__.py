"""Upload module for sharedrive API."""
from .router import create_upload_router
from .service import UploadPipeline, UploadResult, timestamped_name

__all__ = [
    'create_upload_router',
    'UploadPipeline',
    'UploadResult',
    'timestamped_name',
]
