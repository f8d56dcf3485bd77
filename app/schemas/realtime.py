"""
Realtime channel events.

Client and server exchange JSON objects tagged by ``type``; keys are
camelCase on the wire.  Inbound frames are parsed into the ``ClientEvent``
tagged union before any handler sees them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Client -> server ──────────────────────────────────────────────────────────

class SendMessageEvent(_WireModel):
    type: Literal["send_message"]
    sender_id: UUID
    receiver_id: UUID
    content: str


class ReadMessagesEvent(_WireModel):
    type: Literal["read_messages"]
    sender_id: UUID


ClientEvent = Annotated[
    Union[SendMessageEvent, ReadMessagesEvent],
    Field(discriminator="type"),
]

client_event_adapter: TypeAdapter[ClientEvent] = TypeAdapter(ClientEvent)


# ── Server -> client ──────────────────────────────────────────────────────────

class MessagePayload(_WireModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str
    read: bool
    created_at: datetime


class MessageSentEvent(_WireModel):
    type: Literal["message_sent"] = "message_sent"
    message: MessagePayload


class NewMessageEvent(_WireModel):
    type: Literal["new_message"] = "new_message"
    message: MessagePayload


class MessagesReadEvent(_WireModel):
    type: Literal["messages_read"] = "messages_read"
    sender_id: UUID


class ErrorEvent(_WireModel):
    type: Literal["error"] = "error"
    message: str


ServerEvent = Union[MessageSentEvent, NewMessageEvent, MessagesReadEvent, ErrorEvent]


def dump_event(event: ServerEvent) -> dict:
    """Serialise a server event to its JSON-ready wire shape."""
    return event.model_dump(mode="json", by_alias=True)
