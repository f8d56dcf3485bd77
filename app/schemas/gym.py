from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

class GymLocation(BaseModel):
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    lat: float = Field(0.0, ge=-90, le=90)
    lng: float = Field(0.0, ge=-180, le=180)

class GymCreate(BaseModel):
    name: str = Field(min_length=1)
    location: GymLocation
    images: list[str] = []
    amenities: list[str] = []
    rating: Optional[float] = Field(None, ge=0, le=5)

class GymUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[GymLocation] = None
    images: Optional[list[str]] = None
    amenities: Optional[list[str]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)

class GymResponse(BaseModel):
    id: UUID
    name: str
    location: dict
    images: list[str] = []
    amenities: list[str] = []
    rating: Optional[float] = None
    added_by: Optional[UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}

class GymRecommendation(BaseModel):
    gym: GymResponse
    score: int = Field(ge=0, le=100)

class SavedGymCreate(BaseModel):
    gym_id: UUID
    match_score: Optional[int] = Field(None, ge=0, le=100)

class SavedGymResponse(BaseModel):
    id: UUID
    user_id: UUID
    gym_id: UUID
    match_score: Optional[int] = None
    saved_at: datetime
    gym: Optional[GymResponse] = None

    model_config = {"from_attributes": True}

class CsvImportError(BaseModel):
    row: int
    error: str
    data: dict

class CsvImportResponse(BaseModel):
    success: bool
    message: str
    processed: int
    imported: list[GymResponse]
    errors: list[CsvImportError]
