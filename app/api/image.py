"""Image routes: admin-only upload, paginated listing, owner-checked delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.auth import get_current_user, require_admin
from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import InvalidInputError
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse
from app.schemas.image import (
    ImageListResponse,
    ImageOut,
    ImageUploadResponse,
    SortField,
    SortOrder,
)
from app.services import image_service

router = APIRouter()

MAX_PAGE_LIMIT = 100


async def _read_image_upload(image: UploadFile | None, max_bytes: int) -> bytes:
    """Validate the multipart 'image' part and return its bytes."""
    if image is None or not image.filename:
        raise InvalidInputError("File is required! Please upload any image file.")
    content_type = (image.content_type or "").lower()
    if not content_type.startswith("image"):
        raise InvalidInputError("Only images are allowed.")
    # Read one byte past the limit so oversized files are detected without buffering them whole.
    content = await image.read(max_bytes + 1)
    if not content:
        raise InvalidInputError("Uploaded file is empty.")
    if len(content) > max_bytes:
        raise InvalidInputError(f"File size must not exceed {max_bytes / (1024 * 1024):g} MB.")
    return content


@router.post("/upload", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    image: Annotated[UploadFile | None, File(description="Image file")] = None,
) -> ImageUploadResponse:
    """
    Upload an image (admin only).

    Send `multipart/form-data` with the file in a field named `image`. The
    binary is stored at the hosting service; its URL and public id are saved
    with the uploader's id.
    """
    settings = get_settings()
    content = await _read_image_upload(image, settings.UPLOAD_MAX_BYTES)
    saved = await image_service.upload_image(
        db,
        content,
        filename=image.filename,
        content_type=image.content_type,
        uploader_id=current_user.id,
        settings=settings,
    )
    return ImageUploadResponse(
        message="Image uploaded successfully!",
        image=ImageOut.model_validate(saved),
    )


@router.get("/get", response_model=ImageListResponse)
def get_images(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = 5,
    sort_by: Annotated[SortField, Query(alias="sortBy")] = "createdAt",
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = "desc",
) -> ImageListResponse:
    """List images page by page, sorted by sortBy in sortOrder."""
    result = image_service.list_images(db, page, limit, sort_by, sort_order)
    return ImageListResponse(
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_images=result.total_images,
        data=[ImageOut.model_validate(img) for img in result.images],
    )


@router.delete("/{image_id}", response_model=MessageResponse)
async def delete_image(
    image_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete an image. Only the user who uploaded it may delete it."""
    await image_service.delete_image(db, image_id, current_user, get_settings())
    return MessageResponse(message="Image deleted successfully!")
