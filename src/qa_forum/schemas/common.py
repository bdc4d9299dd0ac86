"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ImageRef(BaseModel):
    """Reference to an image already uploaded to the blob store."""

    url: str
    public_id: str = Field(..., alias="publicId")
    width: int | None = None
    height: int | None = None
    format: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class Pagination(BaseModel):
    """Page metadata returned by list endpoints."""

    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
