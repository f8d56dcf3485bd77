"""
FitMatch — User accounts, fitness profiles and admin moderation.
"""

from __future__ import annotations

import uuid

import structlog

from app.errors import AuthorizationError, ConflictError, NotFoundError
from app.models import User
from app.repositories.base import Repository
from app.schemas.user import ProfileUpdate, UserCreate

logger = structlog.get_logger("fitmatch.user_service")

_LIST_FIELDS = ("fitness_goals", "gym_preferences", "progress_photos")


class UserService:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    async def register(self, data: UserCreate, is_admin: bool = False) -> User:
        """Create an account.  Usernames are unique case-insensitively."""
        log = logger.bind(username=data.username)

        if await self.repository.get_user_by_username(data.username) is not None:
            log.warning("register_username_taken")
            raise ConflictError("Username already exists")

        payload = data.model_dump()
        payload["is_admin"] = is_admin
        user = await self.repository.create_user(payload)
        log.info("user_registered", user_id=str(user.id), is_admin=is_admin)
        return user

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: uuid.UUID, data: ProfileUpdate) -> User:
        """Apply a partial profile update.

        Goal and preference lists replace the stored ones wholesale; an
        explicit ``null`` clears them to ``[]``.
        """
        changes = data.model_dump(exclude_unset=True)
        for field in _LIST_FIELDS:
            if field in changes and changes[field] is None:
                changes[field] = []
        if "name" in changes and changes["name"] is None:
            del changes["name"]

        user = await self.repository.update_user(user_id, changes)
        if user is None:
            raise NotFoundError("User not found")

        logger.info("profile_updated", user_id=str(user_id), fields=sorted(changes))
        return user

    async def list_public_users(self) -> list[User]:
        """Users visible to other members for matching; banned accounts are hidden."""
        return [u for u in await self.repository.get_all_users() if not u.is_banned]

    # ── Admin ─────────────────────────────────────────────────────────────

    async def list_users(self) -> list[User]:
        return await self.repository.get_all_users()

    async def set_banned(self, actor_id: uuid.UUID, user_id: uuid.UUID, banned: bool) -> User:
        log = logger.bind(actor_id=str(actor_id), user_id=str(user_id), banned=banned)

        target = await self._moderation_target(user_id)
        if target.is_admin:
            log.warning("moderation_refused_admin_target")
            raise AuthorizationError("Cannot ban or unban admin users")

        user = await self.repository.update_user(
            user_id,
            {"is_banned": banned, "status": "banned" if banned else "active"},
        )
        log.info("user_ban_updated")
        return user

    async def delete_user(self, actor_id: uuid.UUID, user_id: uuid.UUID) -> None:
        log = logger.bind(actor_id=str(actor_id), user_id=str(user_id))

        target = await self._moderation_target(user_id)
        if target.is_admin:
            log.warning("moderation_refused_admin_target")
            raise AuthorizationError("Cannot delete admin users")

        await self.repository.delete_user(user_id)
        log.info("user_deleted")

    async def _moderation_target(self, user_id: uuid.UUID) -> User:
        target = await self.repository.get_user(user_id)
        if target is None:
            raise NotFoundError("User not found")
        return target
