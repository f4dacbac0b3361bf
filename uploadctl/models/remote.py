"""Folder and file records returned by the storage server."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import BaseModel


class RemoteFolder(BaseModel):
    """A folder as returned by ``/api/folders``."""

    id: str = Field(..., description="Folder ID")
    name: str = Field("", description="Folder name")
    parent_id: str | None = Field(None, description="Parent folder ID")
    path: str | None = Field(None, description="Server-side path")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Some servers return numeric IDs
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class RemoteFile(BaseModel):
    """A file record as returned by ``/api/files/upload``."""

    id: str = Field(..., description="File ID")
    name: str = Field("", description="File name")
    folder_id: str | None = Field(None, description="Containing folder ID")
    size: int | None = Field(None, description="Size in bytes")
    mime_type: str | None = Field(None, description="MIME type")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
