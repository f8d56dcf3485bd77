"""Unit tests for the realtime gateway and its connection registry."""
import json
import uuid
from contextlib import asynccontextmanager

import pytest
import pytest_asyncio

from app.services.realtime_gateway import ConnectionRegistry, RealtimeGateway
from app.services.user_match_service import UserMatchService


class FakeChannel:
    def __init__(self, fail=False):
        self.sent = []
        self.closed = False
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(data)

    async def close(self):
        self.closed = True


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def gateway(registry, repo):
    @asynccontextmanager
    async def scope():
        yield repo

    return RealtimeGateway(registry, scope)


@pytest_asyncio.fixture
async def matched(repo, pair_locks, alice, bob):
    service = UserMatchService(repo, pair_locks=pair_locks)
    await service.request_match(alice.id, bob.id)
    await service.request_match(bob.id, alice.id)
    return alice, bob


def send_frame(sender_id, receiver_id, content="Spot me?"):
    return json.dumps({
        "type": "send_message",
        "senderId": str(sender_id),
        "receiverId": str(receiver_id),
        "content": content,
    })


class TestConnectionRegistry:

    @pytest.mark.asyncio
    async def test_register_replaces_previous(self, registry):
        user_id = uuid.uuid4()
        old, new = FakeChannel(), FakeChannel()
        assert await registry.register(user_id, old) is None
        assert await registry.register(user_id, new) is old
        assert await registry.get(user_id) is new

    @pytest.mark.asyncio
    async def test_stale_unregister_keeps_replacement(self, registry):
        user_id = uuid.uuid4()
        old, new = FakeChannel(), FakeChannel()
        await registry.register(user_id, old)
        await registry.register(user_id, new)

        assert await registry.unregister(user_id, old) is False
        assert await registry.get(user_id) is new
        assert await registry.unregister(user_id, new) is True
        assert await registry.connected_users() == []

    @pytest.mark.asyncio
    async def test_close_all(self, registry):
        channels = [FakeChannel(), FakeChannel()]
        for channel in channels:
            await registry.register(uuid.uuid4(), channel)
        assert await registry.close_all() == 2
        assert all(c.closed for c in channels)
        assert await registry.connected_users() == []


class TestSendMessageEvent:

    @pytest.mark.asyncio
    async def test_echo_and_push(self, gateway, repo, matched):
        alice, bob = matched
        alice_ch, bob_ch = FakeChannel(), FakeChannel()
        await gateway.connect(alice.id, alice_ch)
        await gateway.connect(bob.id, bob_ch)

        await gateway.handle_raw(alice.id, alice_ch, send_frame(alice.id, bob.id))

        assert len(alice_ch.sent) == 1
        echo = alice_ch.sent[0]
        assert echo["type"] == "message_sent"
        assert echo["message"]["senderId"] == str(alice.id)
        assert echo["message"]["receiverId"] == str(bob.id)
        assert echo["message"]["content"] == "Spot me?"
        assert echo["message"]["read"] is False

        assert bob_ch.sent == [{"type": "new_message", "message": echo["message"]}]
        assert await repo.get_unread_message_count(bob.id) == 1

    @pytest.mark.asyncio
    async def test_offline_receiver_still_persists(self, gateway, repo, matched):
        alice, bob = matched
        alice_ch = FakeChannel()
        await gateway.connect(alice.id, alice_ch)

        await gateway.handle_raw(alice.id, alice_ch, send_frame(alice.id, bob.id))

        assert alice_ch.sent[0]["type"] == "message_sent"
        assert len(await repo.get_messages(alice.id, bob.id)) == 1

    @pytest.mark.asyncio
    async def test_impersonation_rejected(self, gateway, repo, matched):
        alice, bob = matched
        alice_ch = FakeChannel()
        await gateway.connect(alice.id, alice_ch)

        await gateway.handle_raw(alice.id, alice_ch, send_frame(bob.id, alice.id))

        assert alice_ch.sent == [{
            "type": "error",
            "message": "You can only send messages as yourself",
        }]
        assert await repo.get_messages(alice.id, bob.id) == []

    @pytest.mark.asyncio
    async def test_unmatched_receiver(self, gateway, alice, carol):
        alice_ch = FakeChannel()
        await gateway.connect(alice.id, alice_ch)

        await gateway.handle_raw(alice.id, alice_ch, send_frame(alice.id, carol.id))

        assert alice_ch.sent == [{
            "type": "error",
            "message": "You can only message users you've matched with",
        }]

    @pytest.mark.asyncio
    async def test_dead_receiver_channel_is_dropped(self, gateway, registry, repo, matched):
        alice, bob = matched
        alice_ch, bob_ch = FakeChannel(), FakeChannel(fail=True)
        await gateway.connect(alice.id, alice_ch)
        await gateway.connect(bob.id, bob_ch)

        await gateway.handle_raw(alice.id, alice_ch, send_frame(alice.id, bob.id))

        assert alice_ch.sent[0]["type"] == "message_sent"
        assert await registry.get(bob.id) is None
        assert len(await repo.get_messages(alice.id, bob.id)) == 1


class TestReadMessagesEvent:

    @pytest.mark.asyncio
    async def test_marks_read_and_echoes(self, gateway, repo, matched):
        alice, bob = matched
        await repo.create_message(alice.id, bob.id, "hey")
        bob_ch = FakeChannel()
        await gateway.connect(bob.id, bob_ch)

        frame = json.dumps({"type": "read_messages", "senderId": str(alice.id)})
        await gateway.handle_raw(bob.id, bob_ch, frame)

        assert bob_ch.sent == [{"type": "messages_read", "senderId": str(alice.id)}]
        assert await repo.get_unread_message_count(bob.id) == 0


class TestMalformedFrames:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        "not json",
        json.dumps({"type": "send_message", "senderId": "nope"}),
        json.dumps({"type": "read_messages"}),
        json.dumps({"content": "no type"}),
    ])
    async def test_invalid_message_data(self, gateway, alice, raw):
        channel = FakeChannel()
        await gateway.handle_raw(alice.id, channel, raw)
        assert channel.sent == [{"type": "error", "message": "Invalid message data"}]

    @pytest.mark.asyncio
    async def test_unknown_message_type(self, gateway, alice):
        channel = FakeChannel()
        await gateway.handle_raw(alice.id, channel, json.dumps({"type": "typing"}))
        assert channel.sent == [{"type": "error", "message": "Unknown message type"}]
