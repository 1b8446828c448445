"""Pydantic schemas for file operations."""
from pydantic import BaseModel, ConfigDict, Field


class DirectoryItem(BaseModel):
    """One entry of a directory listing."""
    name: str
    is_dir: bool
    path: str


class BrowseResponse(BaseModel):
    """Directory listing."""
    current_path: str
    parent_path: str | None
    items: list[DirectoryItem]


class MkdirRequest(BaseModel):
    """Request body for directory creation."""
    parent_path: str | None = ''
    dir_name: str | None = None


class DeleteRequest(BaseModel):
    """Request body for file or directory deletion."""
    path: str


class MoveRequest(BaseModel):
    """Request body for moving an item into another directory."""
    model_config = ConfigDict(populate_by_name=True)

    source_path: str = Field(alias='sourcePath')
    destination_path: str = Field(alias='destinationPath')


class SaveRequest(BaseModel):
    """Request body for overwriting an existing text file."""
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias='filePath')
    content: str
