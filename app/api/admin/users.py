"""
FitMatch — Admin User Moderation API

List every account, ban or unban members and delete accounts.  Admin
accounts cannot be moderated through these endpoints.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_user_service, require_admin
from app.models import User
from app.schemas.user import ModerationResponse, UserResponse
from app.services.user_service import UserService

logger = structlog.get_logger("fitmatch.api.admin.users")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET / — All accounts
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[UserResponse],
    summary="List all users",
)
async def list_users(
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> list[User]:
    return await service.list_users()


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{user_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a user",
)
async def delete_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> Response:
    """Remove the account along with its matches, messages and saved gyms."""
    await service.delete_user(admin.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ──────────────────────────────────────────────────────────────────────────────
# PUT /{user_id}/ban and /{user_id}/unban
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/{user_id}/ban",
    response_model=ModerationResponse,
    summary="Ban a user",
)
async def ban_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> ModerationResponse:
    user = await service.set_banned(admin.id, user_id, banned=True)
    return ModerationResponse(
        message="User banned successfully",
        user=UserResponse.model_validate(user),
    )


@router.put(
    "/{user_id}/unban",
    response_model=ModerationResponse,
    summary="Unban a user",
)
async def unban_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> ModerationResponse:
    user = await service.set_banned(admin.id, user_id, banned=False)
    return ModerationResponse(
        message="User unbanned successfully",
        user=UserResponse.model_validate(user),
    )
