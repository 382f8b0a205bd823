"""Home route: greets the authenticated user."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.auth import get_current_user
from app.schemas.auth import CurrentUser, WelcomeResponse

router = APIRouter()


@router.get("/welcome", response_model=WelcomeResponse)
def welcome(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> WelcomeResponse:
    return WelcomeResponse(
        message=f"Welcome to the home page {current_user.username}",
        user=current_user,
    )
