"""Upload Pydantic schemas."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Reference to a freshly uploaded image."""

    url: str
    public_id: str = Field(..., serialization_alias="publicId")
    width: int | None = None
    height: int | None = None
    format: str | None = None
    size: int | None = None
