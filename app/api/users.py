"""
FitMatch — Users API

Registration, the caller's own account and fitness profile, and the public
member list used to find training partners.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user, get_user_service
from app.models import User
from app.schemas.user import ProfileUpdate, PublicUserResponse, UserCreate, UserResponse
from app.services.user_service import UserService

logger = structlog.get_logger("fitmatch.api.users")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Register
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
) -> User:
    """Create an account for an identity verified upstream.

    Returns 409 when the username is already taken (case-insensitive).
    """
    log = logger.bind(username=payload.username)
    log.info("create_user_start")

    user = await service.register(payload)

    log.info("create_user_complete", user_id=str(user.id))
    return user


# ──────────────────────────────────────────────────────────────────────────────
# GET / — Public member list
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[PublicUserResponse],
    summary="List members",
)
async def list_users(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> list[User]:
    """Public profiles of every other non-banned member."""
    users = await service.list_public_users()
    return [u for u in users if u.id != current_user.id]


# ──────────────────────────────────────────────────────────────────────────────
# GET /me — Current user
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current user",
)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


# ──────────────────────────────────────────────────────────────────────────────
# PUT /me/profile — Update fitness profile
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/me/profile",
    response_model=UserResponse,
    summary="Update the current user's profile",
)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> User:
    """Partially update the profile.

    ``fitness_goals`` and ``gym_preferences`` replace the stored lists; these
    are the inputs to gym recommendations.
    """
    log = logger.bind(user_id=str(current_user.id))
    log.info("update_profile_start")

    user = await service.update_profile(current_user.id, payload)

    log.info("update_profile_complete")
    return user
