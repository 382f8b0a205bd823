"""Image metadata operations: upload via the hosting service, paginated listing, owner-checked delete."""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, InternalError, NotFoundError
from app.models.image import Image
from app.schemas.auth import CurrentUser
from app.services import cloud_storage
from app.services.cloud_storage import CloudStorageError, CloudStorageNotConfiguredError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Query-string sort keys -> columns.
SORT_COLUMNS = {
    "createdAt": Image.created_at,
    "updatedAt": Image.updated_at,
    "url": Image.url,
    "publicId": Image.public_id,
}


@dataclass(frozen=True)
class ImagePage:
    images: list[Image]
    current_page: int
    total_pages: int
    total_images: int


async def upload_image(
    db: Session,
    content: bytes,
    filename: str,
    content_type: str,
    uploader_id: int,
    settings: "Settings",
) -> Image:
    """Send the bytes to the hosting service and persist the returned url/public id."""
    try:
        uploaded = await cloud_storage.upload_image(content, filename, content_type, settings)
    except CloudStorageNotConfiguredError as e:
        logger.error("Image upload refused: %s", e.message)
        raise InternalError() from e
    except CloudStorageError as e:
        logger.exception("Image upload to hosting service failed: %s", e.message)
        raise InternalError() from e

    image = Image(url=uploaded.url, public_id=uploaded.public_id, uploaded_by=uploader_id)
    try:
        db.add(image)
        db.commit()
        db.refresh(image)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Saving image metadata failed for public_id=%s", uploaded.public_id)
        raise InternalError() from e
    logger.info("Image id=%s uploaded by user id=%s", image.id, uploader_id)
    return image


def list_images(
    db: Session,
    page: int,
    limit: int,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> ImagePage:
    """Return one page of images; skip = (page - 1) * limit, totalPages = ceil(total / limit)."""
    column = SORT_COLUMNS[sort_by]
    if sort_order == "asc":
        ordering = (column.asc(), Image.id.asc())
    else:
        ordering = (column.desc(), Image.id.desc())
    skip = (page - 1) * limit

    try:
        total = db.query(func.count(Image.id)).scalar() or 0
        images = db.query(Image).order_by(*ordering).offset(skip).limit(limit).all()
    except SQLAlchemyError as e:
        logger.exception("Listing images failed")
        raise InternalError() from e

    return ImagePage(
        images=images,
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_images=total,
    )


async def delete_image(
    db: Session,
    image_id: int,
    current_user: CurrentUser,
    settings: "Settings",
) -> None:
    """Delete an image the current user uploaded, at the hosting service and then in the database."""
    try:
        image = db.get(Image, image_id)
    except SQLAlchemyError as e:
        logger.exception("Image lookup failed for id=%s", image_id)
        raise InternalError() from e
    if image is None:
        raise NotFoundError("Image not found! Please try with a different image ID.")
    if image.uploaded_by != current_user.id:
        logger.info(
            "Delete of image id=%s refused for user id=%s (owner id=%s)",
            image_id,
            current_user.id,
            image.uploaded_by,
        )
        raise ForbiddenError(
            "You are not authorized to delete this image because you haven't uploaded it."
        )

    try:
        await cloud_storage.delete_image(image.public_id, settings)
    except CloudStorageNotConfiguredError as e:
        logger.error("Image delete refused: %s", e.message)
        raise InternalError() from e
    except CloudStorageError as e:
        logger.exception("Image delete at hosting service failed: %s", e.message)
        raise InternalError() from e

    try:
        db.delete(image)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Deleting image metadata failed for id=%s", image_id)
        raise InternalError() from e
    logger.info("Image id=%s deleted by user id=%s", image_id, current_user.id)
