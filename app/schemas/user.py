from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1)
    email: Optional[str] = None
    age: Optional[int] = Field(None, ge=13, le=120)
    gender: Optional[str] = None
    fitness_goals: list[str] = []
    gym_preferences: list[str] = []

class UserResponse(BaseModel):
    id: UUID
    username: str
    name: str
    email: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    fitness_goals: list[str] = []
    gym_preferences: list[str] = []
    body_measurements: Optional[dict] = None
    profile_pic: Optional[str] = None
    progress_photos: list[str] = []
    is_admin: bool
    is_banned: bool
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}

class PublicUserResponse(BaseModel):
    id: UUID
    name: str
    fitness_goals: list[str] = []
    gym_preferences: list[str] = []
    profile_pic: Optional[str] = None

    model_config = {"from_attributes": True}

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=13, le=120)
    gender: Optional[str] = None
    fitness_goals: Optional[list[str]] = None
    gym_preferences: Optional[list[str]] = None
    body_measurements: Optional[dict] = None
    profile_pic: Optional[str] = None
    progress_photos: Optional[list[str]] = None

class ModerationResponse(BaseModel):
    message: str
    user: UserResponse
