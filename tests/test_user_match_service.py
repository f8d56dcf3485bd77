"""Unit tests for UserMatchService — the bilateral match state machine."""
import asyncio
import uuid

import pytest

from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.repositories.memory import InMemoryRepository
from app.services.user_match_service import PairLocks, UserMatchService


class YieldingRepository(InMemoryRepository):
    """Suspends during the pair lookup so concurrent requests interleave."""

    def __init__(self, pair_locks):
        super().__init__()
        self.pair_locks = pair_locks
        self.lookups_under_lock = []

    async def get_user_match_by_users(self, user_a_id, user_b_id):
        self.lookups_under_lock.append(self.pair_locks.for_pair(user_a_id, user_b_id).locked())
        await asyncio.sleep(0)
        return await super().get_user_match_by_users(user_a_id, user_b_id)


@pytest.fixture
def service(repo, pair_locks):
    return UserMatchService(repo, pair_locks=pair_locks)


class TestRequestMatch:

    @pytest.mark.asyncio
    async def test_first_request_is_pending(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id, match_score=82.5)
        assert match.status == "pending"
        assert match.sender_id == alice.id
        assert match.receiver_id == bob.id
        assert match.match_score == 82.5

    @pytest.mark.asyncio
    async def test_reciprocal_request_accepts(self, service, alice, bob):
        first = await service.request_match(alice.id, bob.id)
        second = await service.request_match(bob.id, alice.id)

        assert second.id == first.id
        assert second.status == "accepted"
        # Direction of the original request is preserved
        assert second.sender_id == alice.id
        assert len(await service.list_matches(alice.id)) == 1

    @pytest.mark.asyncio
    async def test_repeat_request_is_idempotent(self, service, alice, bob):
        first = await service.request_match(alice.id, bob.id)
        again = await service.request_match(alice.id, bob.id)
        assert again.id == first.id
        assert again.status == "pending"

    @pytest.mark.asyncio
    async def test_request_after_rejection_is_noop(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id)
        await service.respond_to_match(match.id, bob.id, "rejected")

        again = await service.request_match(bob.id, alice.id)
        assert again.status == "rejected"

    @pytest.mark.asyncio
    async def test_self_match_rejected(self, service, alice):
        with pytest.raises(ValidationError):
            await service.request_match(alice.id, alice.id)

    @pytest.mark.asyncio
    async def test_unknown_receiver(self, service, alice):
        with pytest.raises(NotFoundError):
            await service.request_match(alice.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_simultaneous_reciprocal_requests_resolve_to_one_accepted(
        self, service, alice, bob
    ):
        results = await asyncio.gather(
            service.request_match(alice.id, bob.id),
            service.request_match(bob.id, alice.id),
        )
        assert results[0].id == results[1].id

        matches = await service.list_matches(alice.id)
        assert len(matches) == 1
        assert matches[0].status == "accepted"

    @pytest.mark.asyncio
    async def test_interleaved_reciprocal_requests_are_serialised(self):
        pair_locks = PairLocks()
        repo = YieldingRepository(pair_locks)
        service = UserMatchService(repo, pair_locks=pair_locks)
        dana = await repo.create_user({"username": "dana", "name": "Dana"})
        eli = await repo.create_user({"username": "eli", "name": "Eli"})

        first, second = await asyncio.gather(
            service.request_match(dana.id, eli.id),
            service.request_match(eli.id, dana.id),
        )

        assert first.id == second.id
        assert repo.lookups_under_lock == [True, True]
        matches = await service.list_matches(dana.id)
        assert len(matches) == 1
        assert matches[0].status == "accepted"


class TestRespondToMatch:

    @pytest.mark.asyncio
    async def test_receiver_accepts(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id)
        updated = await service.respond_to_match(match.id, bob.id, "accepted")
        assert updated.status == "accepted"
        assert await service.is_connected(alice.id, bob.id)
        assert await service.is_connected(bob.id, alice.id)

    @pytest.mark.asyncio
    async def test_sender_cannot_respond(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id)
        with pytest.raises(AuthorizationError):
            await service.respond_to_match(match.id, alice.id, "accepted")
        assert (await service.get_match_between(alice.id, bob.id)).status == "pending"

    @pytest.mark.asyncio
    async def test_outsider_cannot_respond(self, service, alice, bob, carol):
        match = await service.request_match(alice.id, bob.id)
        with pytest.raises(AuthorizationError):
            await service.respond_to_match(match.id, carol.id, "rejected")

    @pytest.mark.asyncio
    async def test_invalid_status(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id)
        with pytest.raises(ValidationError):
            await service.respond_to_match(match.id, bob.id, "pending")

    @pytest.mark.asyncio
    async def test_unknown_match(self, service, bob):
        with pytest.raises(NotFoundError):
            await service.respond_to_match(uuid.uuid4(), bob.id, "accepted")

    @pytest.mark.asyncio
    async def test_resolved_match_is_left_unchanged(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id)
        await service.respond_to_match(match.id, bob.id, "accepted")

        again = await service.respond_to_match(match.id, bob.id, "rejected")
        assert again.status == "accepted"


class TestListAndDelete:

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, service, alice, bob, carol):
        accepted = await service.request_match(alice.id, bob.id)
        await service.respond_to_match(accepted.id, bob.id, "accepted")
        await service.request_match(carol.id, alice.id)

        assert len(await service.list_matches(alice.id)) == 2
        assert [m.id for m in await service.list_matches(alice.id, "accepted")] == [accepted.id]
        assert len(await service.list_matches(alice.id, "pending")) == 1
        assert await service.list_matches(bob.id, "pending") == []

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_status(self, service, alice):
        with pytest.raises(ValidationError):
            await service.list_matches(alice.id, "maybe")

    @pytest.mark.asyncio
    async def test_participant_deletes(self, service, alice, bob):
        match = await service.request_match(alice.id, bob.id)
        assert await service.delete_match(match.id, bob.id) is True
        assert await service.get_match_between(alice.id, bob.id) is None

        # The pair can start over after deletion
        fresh = await service.request_match(bob.id, alice.id)
        assert fresh.status == "pending"
        assert fresh.sender_id == bob.id

    @pytest.mark.asyncio
    async def test_outsider_cannot_delete(self, service, alice, bob, carol):
        match = await service.request_match(alice.id, bob.id)
        with pytest.raises(AuthorizationError):
            await service.delete_match(match.id, carol.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_match(self, service, alice):
        with pytest.raises(NotFoundError):
            await service.delete_match(uuid.uuid4(), alice.id)
