from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Literal, Optional

from app.schemas.user import PublicUserResponse

class UserMatchCreate(BaseModel):
    receiver_id: UUID
    sender_id: Optional[UUID] = None  # must equal the caller when given
    match_score: Optional[float] = None

class UserMatchRespond(BaseModel):
    status: Literal["accepted", "rejected"]

class UserMatchResponse(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    status: str
    match_score: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

class UserMatchListItem(UserMatchResponse):
    other_user: Optional[PublicUserResponse] = None
