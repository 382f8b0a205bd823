"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.image import Image
from app.models.user import Role, User

__all__ = ["Base", "Image", "Role", "User"]
