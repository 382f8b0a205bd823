"""API routes."""

from fastapi import APIRouter

from app.api import auth, health, home, image

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(home.router, prefix="/home", tags=["home"])
router.include_router(image.router, prefix="/image", tags=["image"])
