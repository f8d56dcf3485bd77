"""
FitMatch — Messages API

HTTP side of the message channel.  Sending here is equivalent to the
realtime ``send_message`` event, minus the push to a connected receiver.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user, get_message_service
from app.models import Message, User
from app.schemas.message import MessageCreate, MessageResponse, UnreadCountResponse
from app.services.message_service import MessageService

logger = structlog.get_logger("fitmatch.api.messages")

router = APIRouter()


# Registered before /{user_id} so "unread" is not parsed as a user id.
@router.get(
    "/unread/count",
    response_model=UnreadCountResponse,
    summary="Unread message count",
)
async def unread_count(
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await service.unread_count(current_user.id))


@router.get(
    "/{user_id}",
    response_model=list[MessageResponse],
    summary="Conversation with a matched user",
)
async def get_conversation(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> list[Message]:
    """Messages with ``user_id`` oldest first.  Opening the conversation
    marks everything they sent to the caller as read."""
    return await service.get_conversation(current_user.id, user_id)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> Message:
    log = logger.bind(sender_id=str(current_user.id), receiver_id=str(payload.receiver_id))

    if payload.sender_id is not None and payload.sender_id != current_user.id:
        log.warning("send_message_impersonation")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only send messages as yourself",
        )

    return await service.send_message(current_user.id, payload.receiver_id, payload.content)
