"""
FitMatch — In-process repository.

Dict-backed implementation of :class:`Repository` used for local development
(``STORAGE_BACKEND=memory``) and the test-suite.  Records are plain ORM model
instances that are never attached to a session, so every column default is
applied here explicitly.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from app.models import Gym, MatchStatus, Message, SavedGym, User, UserMatch, canonical_pair
from app.repositories.base import Clock, Repository, utcnow

logger = structlog.get_logger("fitmatch.repositories.memory")


class InMemoryRepository(Repository):
    """Process-local store.  Safe under a single asyncio event loop because no
    method awaits between reading and writing its dictionaries."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._users: dict[uuid.UUID, User] = {}
        self._gyms: dict[uuid.UUID, Gym] = {}
        self._saved_gyms: dict[tuple[uuid.UUID, uuid.UUID], SavedGym] = {}
        self._matches: dict[uuid.UUID, UserMatch] = {}
        self._matches_by_pair: dict[tuple[uuid.UUID, uuid.UUID], uuid.UUID] = {}
        self._messages: list[Message] = []

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        wanted = username.lower()
        for user in self._users.values():
            if user.username.lower() == wanted:
                return user
        return None

    async def create_user(self, data: dict[str, Any]) -> User:
        user = User(
            id=uuid.uuid4(),
            username=data["username"],
            name=data["name"],
            email=data.get("email"),
            age=data.get("age"),
            gender=data.get("gender"),
            fitness_goals=list(data.get("fitness_goals") or []),
            gym_preferences=list(data.get("gym_preferences") or []),
            body_measurements=data.get("body_measurements"),
            profile_pic=data.get("profile_pic"),
            progress_photos=list(data.get("progress_photos") or []),
            is_admin=bool(data.get("is_admin", False)),
            is_banned=bool(data.get("is_banned", False)),
            status=data.get("status", "active"),
            created_at=self._clock(),
        )
        self._users[user.id] = user
        return user

    async def update_user(self, user_id: uuid.UUID, data: dict[str, Any]) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        for field, value in data.items():
            setattr(user, field, value)
        return user

    async def get_all_users(self) -> list[User]:
        return list(self._users.values())

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        if self._users.pop(user_id, None) is None:
            return False

        # Mirror the ON DELETE CASCADE foreign keys of the SQL schema
        for key in [k for k in self._saved_gyms if k[0] == user_id]:
            del self._saved_gyms[key]
        for match in [m for m in self._matches.values() if m.involves(user_id)]:
            await self.delete_user_match(match.id)
        self._messages = [
            m for m in self._messages
            if user_id not in (m.sender_id, m.receiver_id)
        ]
        for gym in self._gyms.values():
            if gym.added_by == user_id:
                gym.added_by = None

        logger.debug("memory_user_deleted", user_id=str(user_id))
        return True

    # ── Gyms ──────────────────────────────────────────────────────────────

    async def get_gym(self, gym_id: uuid.UUID) -> Gym | None:
        return self._gyms.get(gym_id)

    async def get_all_gyms(self) -> list[Gym]:
        return list(self._gyms.values())

    async def create_gym(self, data: dict[str, Any]) -> Gym:
        gym = Gym(
            id=uuid.uuid4(),
            name=data["name"],
            location=dict(data.get("location") or {}),
            images=list(data.get("images") or []),
            amenities=list(data.get("amenities") or []),
            rating=data.get("rating"),
            added_by=data.get("added_by"),
            created_at=self._clock(),
        )
        self._gyms[gym.id] = gym
        return gym

    async def update_gym(self, gym_id: uuid.UUID, data: dict[str, Any]) -> Gym | None:
        gym = self._gyms.get(gym_id)
        if gym is None:
            return None
        for field, value in data.items():
            setattr(gym, field, value)
        return gym

    async def delete_gym(self, gym_id: uuid.UUID) -> bool:
        if self._gyms.pop(gym_id, None) is None:
            return False
        for key in [k for k in self._saved_gyms if k[1] == gym_id]:
            del self._saved_gyms[key]
        return True

    # ── Saved gyms ────────────────────────────────────────────────────────

    async def get_saved_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> SavedGym | None:
        return self._saved_gyms.get((user_id, gym_id))

    async def get_saved_gyms_by_user(self, user_id: uuid.UUID) -> list[SavedGym]:
        return [s for (uid, _), s in self._saved_gyms.items() if uid == user_id]

    async def save_gym(
        self,
        user_id: uuid.UUID,
        gym_id: uuid.UUID,
        match_score: int | None = None,
    ) -> SavedGym:
        existing = self._saved_gyms.get((user_id, gym_id))
        if existing is not None:
            if match_score is not None:
                existing.match_score = match_score
            return existing

        saved = SavedGym(
            id=uuid.uuid4(),
            user_id=user_id,
            gym_id=gym_id,
            match_score=match_score,
            saved_at=self._clock(),
        )
        self._saved_gyms[(user_id, gym_id)] = saved
        return saved

    async def delete_saved_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> bool:
        return self._saved_gyms.pop((user_id, gym_id), None) is not None

    # ── User matches ──────────────────────────────────────────────────────

    async def get_user_matches(
        self,
        user_id: uuid.UUID,
        status: str | None = None,
    ) -> list[UserMatch]:
        matches = [
            m for m in self._matches.values()
            if m.involves(user_id) and (status is None or m.status == status)
        ]
        return sorted(matches, key=lambda m: m.created_at, reverse=True)

    async def get_user_match(self, match_id: uuid.UUID) -> UserMatch | None:
        return self._matches.get(match_id)

    async def get_user_match_by_users(
        self,
        user_a_id: uuid.UUID,
        user_b_id: uuid.UUID,
    ) -> UserMatch | None:
        match_id = self._matches_by_pair.get(canonical_pair(user_a_id, user_b_id))
        return self._matches.get(match_id) if match_id is not None else None

    async def create_user_match(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        match_score: float | None = None,
    ) -> UserMatch:
        pair = canonical_pair(sender_id, receiver_id)
        existing_id = self._matches_by_pair.get(pair)
        if existing_id is not None:
            return self._matches[existing_id]

        now = self._clock()
        match = UserMatch(
            id=uuid.uuid4(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            pair_low=pair[0],
            pair_high=pair[1],
            status=MatchStatus.PENDING.value,
            match_score=match_score,
            created_at=now,
            updated_at=now,
        )
        self._matches[match.id] = match
        self._matches_by_pair[pair] = match.id
        return match

    async def update_user_match_status(self, match_id: uuid.UUID, status: str) -> UserMatch | None:
        match = self._matches.get(match_id)
        if match is None:
            return None
        match.status = status
        match.updated_at = self._clock()
        return match

    async def delete_user_match(self, match_id: uuid.UUID) -> bool:
        match = self._matches.pop(match_id, None)
        if match is None:
            return False
        self._matches_by_pair.pop((match.pair_low, match.pair_high), None)
        return True

    # ── Messages ──────────────────────────────────────────────────────────

    async def get_messages(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> list[Message]:
        pair = {user_id, other_user_id}
        conversation = [
            m for m in self._messages
            if {m.sender_id, m.receiver_id} == pair
        ]
        return sorted(conversation, key=lambda m: m.created_at)

    async def get_unread_message_count(self, user_id: uuid.UUID) -> int:
        return sum(1 for m in self._messages if m.receiver_id == user_id and not m.read)

    async def create_message(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
    ) -> Message:
        message = Message(
            id=uuid.uuid4(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            read=False,
            created_at=self._clock(),
        )
        self._messages.append(message)
        return message

    async def mark_messages_as_read(self, receiver_id: uuid.UUID, sender_id: uuid.UUID) -> int:
        marked = 0
        for message in self._messages:
            if message.receiver_id == receiver_id and message.sender_id == sender_id and not message.read:
                message.read = True
                marked += 1
        return marked
