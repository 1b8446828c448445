"""Pydantic schemas for share links."""
from pydantic import BaseModel


class ShareRequest(BaseModel):
    """Request body for share creation."""
    path: str


class ShareResponse(BaseModel):
    """A freshly created share link."""
    share_id: str
    share_url: str
    qr_code_data_url: str | None
