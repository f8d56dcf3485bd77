"""
FitMatch — User match state machine.

Bilateral connection requests between two users:

  (none) --request A->B--> pending(A->B)
  pending(A->B) --request B->A--> accepted      (reciprocal request)
  pending(A->B) --B responds--> accepted | rejected
  any --participant deletes--> (none)

At most one record exists per unordered pair.  ``request_match`` serialises
on a per-pair lock so that two nearly simultaneous reciprocal requests
resolve to one accepted record rather than two pending ones; the SQL store
backs this up with a unique constraint on the canonical pair.
"""

from __future__ import annotations

import asyncio
import uuid
import weakref

import structlog

from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models import MatchStatus, UserMatch, canonical_pair
from app.repositories.base import Repository

logger = structlog.get_logger("fitmatch.user_match_service")

_RESPONSE_STATUSES = (MatchStatus.ACCEPTED.value, MatchStatus.REJECTED.value)


class PairLocks:
    """Process-wide ``asyncio.Lock`` per canonical user pair.

    Locks live only while someone holds a reference to them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[tuple[uuid.UUID, uuid.UUID], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_pair(self, user_a_id: uuid.UUID, user_b_id: uuid.UUID) -> asyncio.Lock:
        key = canonical_pair(user_a_id, user_b_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


_default_pair_locks = PairLocks()


class UserMatchService:
    """Request, respond to, list and delete user-to-user matches."""

    def __init__(self, repository: Repository, pair_locks: PairLocks | None = None) -> None:
        self.repository = repository
        self.pair_locks = pair_locks or _default_pair_locks

    # ── Public API ────────────────────────────────────────────────────────

    async def request_match(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        match_score: float | None = None,
    ) -> UserMatch:
        """Ask to connect ``sender_id`` with ``receiver_id``.

        Creates a pending record, accepts the opposite-direction pending
        request if one exists, or returns the existing record unchanged.
        """
        log = logger.bind(sender_id=str(sender_id), receiver_id=str(receiver_id))

        if sender_id == receiver_id:
            raise ValidationError("You cannot match with yourself")

        receiver = await self.repository.get_user(receiver_id)
        if receiver is None:
            log.warning("request_match_receiver_not_found")
            raise NotFoundError("User not found")

        async with self.pair_locks.for_pair(sender_id, receiver_id):
            match = await self.repository.get_user_match_by_users(sender_id, receiver_id)
            if match is None:
                match = await self.repository.create_user_match(
                    sender_id, receiver_id, match_score=match_score
                )
                if match.sender_id == sender_id:
                    log.info("user_match_requested", match_id=str(match.id))
                    return match

            if match.status == MatchStatus.PENDING.value and match.sender_id == receiver_id:
                accepted = await self.repository.update_user_match_status(
                    match.id, MatchStatus.ACCEPTED.value
                )
                log.info("user_match_reciprocated", match_id=str(match.id))
                return accepted

        log.info(
            "user_match_request_noop",
            match_id=str(match.id),
            status=match.status,
        )
        return match

    async def respond_to_match(
        self,
        match_id: uuid.UUID,
        actor_id: uuid.UUID,
        new_status: str,
    ) -> UserMatch:
        """Accept or reject a pending match; only its receiver may do so.

        Responding to a match that is no longer pending leaves it unchanged.
        """
        log = logger.bind(match_id=str(match_id), actor_id=str(actor_id))

        if new_status not in _RESPONSE_STATUSES:
            raise ValidationError("Valid status required (accepted or rejected)")

        match = await self.repository.get_user_match(match_id)
        if match is None:
            log.warning("respond_to_match_not_found")
            raise NotFoundError("Match not found")

        if match.receiver_id != actor_id:
            log.warning("respond_to_match_forbidden")
            raise AuthorizationError("You can only respond to matches sent to you")

        if match.status != MatchStatus.PENDING.value:
            log.info(
                "respond_to_match_already_resolved",
                status=match.status,
                requested=new_status,
            )
            return match

        updated = await self.repository.update_user_match_status(match_id, new_status)
        log.info("user_match_responded", status=new_status)
        return updated

    async def list_matches(
        self,
        user_id: uuid.UUID,
        status: str | None = None,
    ) -> list[UserMatch]:
        if status is not None and status not in {s.value for s in MatchStatus}:
            raise ValidationError(f"Unknown match status {status!r}")
        return await self.repository.get_user_matches(user_id, status)

    async def delete_match(self, match_id: uuid.UUID, actor_id: uuid.UUID) -> bool:
        log = logger.bind(match_id=str(match_id), actor_id=str(actor_id))

        match = await self.repository.get_user_match(match_id)
        if match is None:
            raise NotFoundError("Match not found")

        if not match.involves(actor_id):
            log.warning("delete_match_forbidden")
            raise AuthorizationError("You can only delete matches you're part of")

        removed = await self.repository.delete_user_match(match_id)
        log.info("user_match_deleted", removed=removed)
        return removed

    async def get_match_between(
        self,
        user_a_id: uuid.UUID,
        user_b_id: uuid.UUID,
    ) -> UserMatch | None:
        return await self.repository.get_user_match_by_users(user_a_id, user_b_id)

    async def is_connected(self, user_a_id: uuid.UUID, user_b_id: uuid.UUID) -> bool:
        """True when an accepted match links the two users, in either direction."""
        match = await self.get_match_between(user_a_id, user_b_id)
        return match is not None and match.status == MatchStatus.ACCEPTED.value
