"""
FitMatch — PostgreSQL repository.

Async SQLAlchemy implementation of :class:`Repository`.  The caller owns the
session and its transaction boundary (see ``app.api.deps.repository_scope``);
methods only ``flush`` so that generated values are visible immediately.

The test suite runs on the in-memory store; this module, including the
``ON CONFLICT`` paths, is only exercised against a live PostgreSQL database.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Gym, MatchStatus, Message, SavedGym, User, UserMatch, canonical_pair
from app.repositories.base import Clock, Repository, utcnow

logger = structlog.get_logger("fitmatch.repositories.sql")


class SqlAlchemyRepository(Repository):
    def __init__(self, session: AsyncSession, clock: Clock = utcnow) -> None:
        self.session = session
        self._clock = clock

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        stmt = select(User).where(func.lower(User.username) == username.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(self, data: dict[str, Any]) -> User:
        user = User(created_at=self._clock(), **data)
        self.session.add(user)
        await self.session.flush()
        return user

    async def update_user(self, user_id: uuid.UUID, data: dict[str, Any]) -> User | None:
        user = await self.get_user(user_id)
        if user is None:
            return None
        for field, value in data.items():
            setattr(user, field, value)
        await self.session.flush()
        return user

    async def get_all_users(self) -> list[User]:
        result = await self.session.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        # Saved gyms, matches and messages go with the user via ON DELETE CASCADE
        result = await self.session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0

    # ── Gyms ──────────────────────────────────────────────────────────────

    async def get_gym(self, gym_id: uuid.UUID) -> Gym | None:
        return await self.session.get(Gym, gym_id)

    async def get_all_gyms(self) -> list[Gym]:
        result = await self.session.execute(select(Gym).order_by(Gym.created_at))
        return list(result.scalars().all())

    async def create_gym(self, data: dict[str, Any]) -> Gym:
        gym = Gym(created_at=self._clock(), **data)
        self.session.add(gym)
        await self.session.flush()
        return gym

    async def update_gym(self, gym_id: uuid.UUID, data: dict[str, Any]) -> Gym | None:
        gym = await self.get_gym(gym_id)
        if gym is None:
            return None
        for field, value in data.items():
            setattr(gym, field, value)
        await self.session.flush()
        return gym

    async def delete_gym(self, gym_id: uuid.UUID) -> bool:
        result = await self.session.execute(delete(Gym).where(Gym.id == gym_id))
        return result.rowcount > 0

    # ── Saved gyms ────────────────────────────────────────────────────────

    async def get_saved_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> SavedGym | None:
        stmt = select(SavedGym).where(
            SavedGym.user_id == user_id,
            SavedGym.gym_id == gym_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_saved_gyms_by_user(self, user_id: uuid.UUID) -> list[SavedGym]:
        stmt = (
            select(SavedGym)
            .where(SavedGym.user_id == user_id)
            .order_by(SavedGym.saved_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save_gym(
        self,
        user_id: uuid.UUID,
        gym_id: uuid.UUID,
        match_score: int | None = None,
    ) -> SavedGym:
        stmt = pg_insert(SavedGym).values(
            id=uuid.uuid4(),
            user_id=user_id,
            gym_id=gym_id,
            match_score=match_score,
            saved_at=self._clock(),
        )
        if match_score is not None:
            stmt = stmt.on_conflict_do_update(
                constraint="uq_saved_gym_pair",
                set_={"match_score": match_score},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(constraint="uq_saved_gym_pair")
        await self.session.execute(stmt)

        saved = await self.get_saved_gym(user_id, gym_id)
        if saved is not None:
            await self.session.refresh(saved)
        return saved

    async def delete_saved_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            delete(SavedGym).where(
                SavedGym.user_id == user_id,
                SavedGym.gym_id == gym_id,
            )
        )
        return result.rowcount > 0

    # ── User matches ──────────────────────────────────────────────────────

    async def get_user_matches(
        self,
        user_id: uuid.UUID,
        status: str | None = None,
    ) -> list[UserMatch]:
        stmt = select(UserMatch).where(
            or_(UserMatch.sender_id == user_id, UserMatch.receiver_id == user_id)
        )
        if status is not None:
            stmt = stmt.where(UserMatch.status == status)
        stmt = stmt.order_by(UserMatch.created_at.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_match(self, match_id: uuid.UUID) -> UserMatch | None:
        return await self.session.get(UserMatch, match_id)

    async def get_user_match_by_users(
        self,
        user_a_id: uuid.UUID,
        user_b_id: uuid.UUID,
    ) -> UserMatch | None:
        low, high = canonical_pair(user_a_id, user_b_id)
        stmt = select(UserMatch).where(
            UserMatch.pair_low == low,
            UserMatch.pair_high == high,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user_match(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        match_score: float | None = None,
    ) -> UserMatch:
        low, high = canonical_pair(sender_id, receiver_id)
        now = self._clock()

        # A concurrent request for the same pair loses on the unique pair
        # constraint and falls through to reading the winner's row.
        stmt = (
            pg_insert(UserMatch)
            .values(
                id=uuid.uuid4(),
                sender_id=sender_id,
                receiver_id=receiver_id,
                pair_low=low,
                pair_high=high,
                status=MatchStatus.PENDING.value,
                match_score=match_score,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(constraint="uq_user_match_pair")
            .returning(UserMatch.id)
        )
        new_id = (await self.session.execute(stmt)).scalar_one_or_none()

        if new_id is None:
            logger.info(
                "user_match_pair_conflict",
                sender_id=str(sender_id),
                receiver_id=str(receiver_id),
            )
            return await self.get_user_match_by_users(sender_id, receiver_id)

        return await self.get_user_match(new_id)

    async def update_user_match_status(self, match_id: uuid.UUID, status: str) -> UserMatch | None:
        match = await self.get_user_match(match_id)
        if match is None:
            return None
        match.status = status
        match.updated_at = self._clock()
        await self.session.flush()
        return match

    async def delete_user_match(self, match_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            delete(UserMatch).where(UserMatch.id == match_id)
        )
        return result.rowcount > 0

    # ── Messages ──────────────────────────────────────────────────────────

    async def get_messages(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> list[Message]:
        stmt = (
            select(Message)
            .where(
                or_(
                    (Message.sender_id == user_id) & (Message.receiver_id == other_user_id),
                    (Message.sender_id == other_user_id) & (Message.receiver_id == user_id),
                )
            )
            .order_by(Message.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_unread_message_count(self, user_id: uuid.UUID) -> int:
        stmt = select(func.count(Message.id)).where(
            Message.receiver_id == user_id,
            Message.read.is_(False),
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def create_message(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
    ) -> Message:
        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            read=False,
            created_at=self._clock(),
        )
        self.session.add(message)
        await self.session.flush()
        return message

    async def mark_messages_as_read(self, receiver_id: uuid.UUID, sender_id: uuid.UUID) -> int:
        stmt = (
            update(Message)
            .where(
                Message.receiver_id == receiver_id,
                Message.sender_id == sender_id,
                Message.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
