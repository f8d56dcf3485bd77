"""
FitMatch — User model (account + fitness profile).
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(String, nullable=True)
    fitness_goals: Mapped[list[str]] = mapped_column(
        ARRAY(String), default=list, server_default="{}", nullable=False,
        comment="Ordered, user-entered goal labels",
    )
    gym_preferences: Mapped[list[str]] = mapped_column(
        ARRAY(String), default=list, server_default="{}", nullable=False,
        comment="Ordered, user-entered preference labels",
    )
    body_measurements: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    profile_pic: Mapped[str | None] = mapped_column(String, nullable=True)
    progress_photos: Mapped[list[str]] = mapped_column(
        ARRAY(String), default=list, server_default="{}", nullable=False
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    is_banned: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    status: Mapped[str] = mapped_column(
        String, default="active", server_default="active", nullable=False,
        comment="active / banned",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<User {self.username!r} id={self.id}>"
