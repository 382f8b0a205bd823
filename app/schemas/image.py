"""Request/response schemas for image endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel, MessageResponse

SortField = Literal["createdAt", "updatedAt", "url", "publicId"]
SortOrder = Literal["asc", "desc"]


class ImageOut(CamelModel):
    """Image metadata as stored (the binary is served by the hosting service)."""

    id: int
    url: str
    public_id: str
    uploaded_by: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ImageUploadResponse(MessageResponse):
    image: ImageOut


class ImageListResponse(CamelModel):
    """One page of images plus pagination totals."""

    success: bool = True
    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_images: int = Field(..., ge=0)
    data: list[ImageOut] = Field(default_factory=list)
