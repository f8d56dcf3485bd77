"""
FitMatch — Realtime delivery gateway.

Keeps one live duplex channel per connected user and carries chat events
between them:

  client                      gateway                         receiver
  send_message  ──────────▶  validate sender, persist
                ◀──────────  message_sent
                                            ──────────────▶  new_message  (if connected)
  read_messages ──────────▶  mark read
                ◀──────────  messages_read

Domain failures are reported as ``error`` events on the same channel; the
channel stays open.  Offline receivers get nothing pushed and pick the message
up from the conversation history on their next fetch.
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from app.errors import AuthorizationError, FitMatchError
from app.repositories.base import Repository
from app.schemas.realtime import (
    ErrorEvent,
    MessagePayload,
    MessageSentEvent,
    MessagesReadEvent,
    NewMessageEvent,
    ReadMessagesEvent,
    SendMessageEvent,
    ServerEvent,
    client_event_adapter,
    dump_event,
)
from app.services.message_service import MessageService

logger = structlog.get_logger("fitmatch.realtime_gateway")

RepositoryScope = Callable[[], AbstractAsyncContextManager[Repository]]


class Channel(Protocol):
    """The slice of a WebSocket the gateway needs."""

    async def send_json(self, data: Any) -> None: ...


class ConnectionRegistry:
    """Lock-guarded map of user id to their open channel.

    One entry per user: a new connection replaces the previous one.
    """

    def __init__(self) -> None:
        self._channels: dict[uuid.UUID, Channel] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: uuid.UUID, channel: Channel) -> Channel | None:
        """Store ``channel`` for ``user_id`` and return the channel it replaced."""
        async with self._lock:
            previous = self._channels.get(user_id)
            self._channels[user_id] = channel
        return previous

    async def unregister(self, user_id: uuid.UUID, channel: Channel) -> bool:
        """Drop the entry only if it still points at ``channel``, so a stale
        connection closing cannot evict its replacement."""
        async with self._lock:
            if self._channels.get(user_id) is channel:
                del self._channels[user_id]
                return True
        return False

    async def get(self, user_id: uuid.UUID) -> Channel | None:
        async with self._lock:
            return self._channels.get(user_id)

    async def connected_users(self) -> list[uuid.UUID]:
        async with self._lock:
            return list(self._channels)

    async def close_all(self) -> int:
        """Close every registered channel (shutdown) and empty the registry."""
        async with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()

        for channel in channels:
            close = getattr(channel, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception:
                logger.warning("channel_close_failed")
        return len(channels)


class RealtimeGateway:
    """Dispatch inbound realtime events and fan out delivery events.

    Each event runs in its own repository scope, so a message is durable
    before anyone is told it was sent.
    """

    def __init__(self, registry: ConnectionRegistry, repository_scope: RepositoryScope) -> None:
        self.registry = registry
        self.repository_scope = repository_scope

    # ── Connection lifecycle ──────────────────────────────────────────────

    async def authenticate(self, user_id: uuid.UUID) -> bool:
        """True when ``user_id`` names an existing, non-banned user."""
        async with self.repository_scope() as repository:
            user = await repository.get_user(user_id)
        return user is not None and not user.is_banned

    async def connect(self, user_id: uuid.UUID, channel: Channel) -> None:
        previous = await self.registry.register(user_id, channel)
        logger.info(
            "realtime_connected",
            user_id=str(user_id),
            replaced_previous=previous is not None,
        )

    async def disconnect(self, user_id: uuid.UUID, channel: Channel) -> None:
        removed = await self.registry.unregister(user_id, channel)
        logger.info("realtime_disconnected", user_id=str(user_id), removed=removed)

    # ── Event handling ────────────────────────────────────────────────────

    async def handle_raw(self, user_id: uuid.UUID, channel: Channel, raw: str | bytes) -> None:
        """Parse one inbound frame and dispatch it."""
        try:
            event = client_event_adapter.validate_json(raw)
        except PydanticValidationError as exc:
            reason = self._describe_parse_error(exc)
            logger.info("realtime_event_rejected", user_id=str(user_id), reason=reason)
            await self._send(channel, ErrorEvent(message=reason))
            return

        await self.handle_event(user_id, channel, event)

    async def handle_event(
        self,
        user_id: uuid.UUID,
        channel: Channel,
        event: SendMessageEvent | ReadMessagesEvent,
    ) -> None:
        log = logger.bind(user_id=str(user_id), event_type=event.type)
        try:
            if isinstance(event, SendMessageEvent):
                await self._handle_send_message(user_id, channel, event)
            else:
                await self._handle_read_messages(user_id, channel, event)
        except FitMatchError as exc:
            log.info("realtime_event_failed", error=exc.message)
            await self._send(channel, ErrorEvent(message=exc.message))
        except Exception:
            log.exception("realtime_event_error")
            await self._send(channel, ErrorEvent(message="Failed to process message"))

    async def _handle_send_message(
        self,
        user_id: uuid.UUID,
        channel: Channel,
        event: SendMessageEvent,
    ) -> None:
        if event.sender_id != user_id:
            raise AuthorizationError("You can only send messages as yourself")

        async with self.repository_scope() as repository:
            message = await MessageService(repository).send_message(
                event.sender_id, event.receiver_id, event.content
            )
            payload = MessagePayload.model_validate(message)

        await self._send(channel, MessageSentEvent(message=payload))

        receiver_channel = await self.registry.get(event.receiver_id)
        if receiver_channel is None:
            logger.debug("realtime_receiver_offline", receiver_id=str(event.receiver_id))
            return
        await self._push(event.receiver_id, receiver_channel, NewMessageEvent(message=payload))

    async def _handle_read_messages(
        self,
        user_id: uuid.UUID,
        channel: Channel,
        event: ReadMessagesEvent,
    ) -> None:
        async with self.repository_scope() as repository:
            marked = await MessageService(repository).mark_read(
                receiver_id=user_id, sender_id=event.sender_id
            )
        logger.debug("realtime_messages_read", user_id=str(user_id), marked=marked)
        await self._send(channel, MessagesReadEvent(sender_id=event.sender_id))

    # ── Delivery helpers ──────────────────────────────────────────────────

    async def _send(self, channel: Channel, event: ServerEvent) -> None:
        await channel.send_json(dump_event(event))

    async def _push(self, user_id: uuid.UUID, channel: Channel, event: ServerEvent) -> None:
        """Best-effort delivery to another user's channel.  A dead channel is
        dropped from the registry; the message stays in history."""
        try:
            await self._send(channel, event)
        except Exception:
            logger.warning("realtime_push_failed", receiver_id=str(user_id), exc_info=True)
            await self.registry.unregister(user_id, channel)

    @staticmethod
    def _describe_parse_error(exc: PydanticValidationError) -> str:
        if any(err["type"] == "union_tag_invalid" for err in exc.errors()):
            return "Unknown message type"
        return "Invalid message data"
