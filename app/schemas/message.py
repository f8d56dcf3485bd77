from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

class MessageCreate(BaseModel):
    receiver_id: UUID
    content: str = Field(min_length=1)
    sender_id: Optional[UUID] = None  # must equal the caller when given

class MessageResponse(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}

class UnreadCountResponse(BaseModel):
    count: int
