"""
FitMatch — Repository interface.

All persistence goes through this contract so that the services can run
against PostgreSQL (``SqlAlchemyRepository``) or the in-process store used
for development and tests (``InMemoryRepository``).  Both implementations
return the same ORM model classes.
"""

from __future__ import annotations

import abc
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from app.models import Gym, Message, SavedGym, User, UserMatch

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Repository(abc.ABC):
    """CRUD surface over users, gyms, saved gyms, user matches and messages."""

    # ── Users ─────────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def get_user(self, user_id: uuid.UUID) -> User | None: ...

    @abc.abstractmethod
    async def get_user_by_username(self, username: str) -> User | None:
        """Case-insensitive username lookup."""

    @abc.abstractmethod
    async def create_user(self, data: dict[str, Any]) -> User: ...

    @abc.abstractmethod
    async def update_user(self, user_id: uuid.UUID, data: dict[str, Any]) -> User | None: ...

    @abc.abstractmethod
    async def get_all_users(self) -> list[User]: ...

    @abc.abstractmethod
    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """Remove the user together with their saved gyms, matches and messages."""

    # ── Gyms ──────────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def get_gym(self, gym_id: uuid.UUID) -> Gym | None: ...

    @abc.abstractmethod
    async def get_all_gyms(self) -> list[Gym]: ...

    @abc.abstractmethod
    async def create_gym(self, data: dict[str, Any]) -> Gym: ...

    @abc.abstractmethod
    async def update_gym(self, gym_id: uuid.UUID, data: dict[str, Any]) -> Gym | None: ...

    @abc.abstractmethod
    async def delete_gym(self, gym_id: uuid.UUID) -> bool: ...

    # ── Saved gyms ────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def get_saved_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> SavedGym | None: ...

    @abc.abstractmethod
    async def get_saved_gyms_by_user(self, user_id: uuid.UUID) -> list[SavedGym]: ...

    @abc.abstractmethod
    async def save_gym(
        self,
        user_id: uuid.UUID,
        gym_id: uuid.UUID,
        match_score: int | None = None,
    ) -> SavedGym:
        """Create the (user, gym) record, or refresh the snapshotted score of
        the existing one when ``match_score`` is given."""

    @abc.abstractmethod
    async def delete_saved_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> bool: ...

    # ── User matches ──────────────────────────────────────────────────────

    @abc.abstractmethod
    async def get_user_matches(
        self,
        user_id: uuid.UUID,
        status: str | None = None,
    ) -> list[UserMatch]:
        """Matches where the user is sender or receiver, newest first."""

    @abc.abstractmethod
    async def get_user_match(self, match_id: uuid.UUID) -> UserMatch | None: ...

    @abc.abstractmethod
    async def get_user_match_by_users(
        self,
        user_a_id: uuid.UUID,
        user_b_id: uuid.UUID,
    ) -> UserMatch | None:
        """Direction-agnostic lookup by canonical pair."""

    @abc.abstractmethod
    async def create_user_match(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        match_score: float | None = None,
    ) -> UserMatch:
        """Insert a pending match.

        If a record already exists for the unordered pair, that record is
        returned untouched instead.
        """

    @abc.abstractmethod
    async def update_user_match_status(self, match_id: uuid.UUID, status: str) -> UserMatch | None: ...

    @abc.abstractmethod
    async def delete_user_match(self, match_id: uuid.UUID) -> bool: ...

    # ── Messages ──────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def get_messages(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> list[Message]:
        """Messages exchanged between the pair in either direction, oldest first."""

    @abc.abstractmethod
    async def get_unread_message_count(self, user_id: uuid.UUID) -> int: ...

    @abc.abstractmethod
    async def create_message(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
    ) -> Message: ...

    @abc.abstractmethod
    async def mark_messages_as_read(self, receiver_id: uuid.UUID, sender_id: uuid.UUID) -> int:
        """Flip unread messages from ``sender_id`` to ``receiver_id``; return
        how many changed."""
