"""
FitMatch — Message channel between matched users.

Messages can only be created between two users linked by an accepted match;
the check happens at creation time for every transport (HTTP and realtime).
Opening a conversation is the read-receipt trigger: it marks everything the
other party sent to the caller as read.
"""

from __future__ import annotations

import uuid

import structlog

from app.config import get_settings
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models import Message
from app.repositories.base import Repository
from app.services.user_match_service import UserMatchService

logger = structlog.get_logger("fitmatch.message_service")


class MessageService:
    def __init__(
        self,
        repository: Repository,
        match_service: UserMatchService | None = None,
        max_length: int | None = None,
    ) -> None:
        self.repository = repository
        self.match_service = match_service or UserMatchService(repository)
        self.max_length = max_length or get_settings().MAX_MESSAGE_LENGTH

    async def send_message(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
    ) -> Message:
        """Persist a message from ``sender_id`` to ``receiver_id``.

        Raises
        ------
        ValidationError
            Blank or over-long content.
        NotFoundError
            The receiver does not exist.
        AuthorizationError
            No accepted match connects the two users.
        """
        log = logger.bind(sender_id=str(sender_id), receiver_id=str(receiver_id))

        if content is None or not content.strip():
            raise ValidationError("Message content is required")
        if len(content) > self.max_length:
            raise ValidationError(
                f"Message content exceeds {self.max_length} characters"
            )

        receiver = await self.repository.get_user(receiver_id)
        if receiver is None:
            raise NotFoundError("Recipient not found")

        if not await self.match_service.is_connected(sender_id, receiver_id):
            log.warning("send_message_not_matched")
            raise AuthorizationError("You can only message users you've matched with")

        message = await self.repository.create_message(sender_id, receiver_id, content)
        log.info("message_sent", message_id=str(message.id), length=len(content))
        return message

    async def get_conversation(
        self,
        user_id: uuid.UUID,
        other_user_id: uuid.UUID,
    ) -> list[Message]:
        """Return the pair's messages oldest first, marking the ones
        ``other_user_id`` sent to ``user_id`` as read."""
        log = logger.bind(user_id=str(user_id), other_user_id=str(other_user_id))

        other_user = await self.repository.get_user(other_user_id)
        if other_user is None:
            raise NotFoundError("User not found")

        if not await self.match_service.is_connected(user_id, other_user_id):
            log.warning("get_conversation_not_matched")
            raise AuthorizationError("You can only message users you've matched with")

        marked = await self.mark_read(receiver_id=user_id, sender_id=other_user_id)
        messages = await self.repository.get_messages(user_id, other_user_id)

        log.info("conversation_opened", message_count=len(messages), marked_read=marked)
        return messages

    async def mark_read(self, receiver_id: uuid.UUID, sender_id: uuid.UUID) -> int:
        return await self.repository.mark_messages_as_read(receiver_id, sender_id)

    async def unread_count(self, user_id: uuid.UUID) -> int:
        return await self.repository.get_unread_message_count(user_id)
