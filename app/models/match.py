"""
FitMatch — UserMatch model (bilateral connection request between two users).
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class MatchStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def canonical_pair(user_a_id: uuid.UUID, user_b_id: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    """Order-independent key for the unordered pair {A, B}."""
    return (user_a_id, user_b_id) if user_a_id <= user_b_id else (user_b_id, user_a_id)


class UserMatch(Base):
    __tablename__ = "user_matches"
    __table_args__ = (
        # One record per unordered pair, whichever direction created it
        UniqueConstraint("pair_low", "pair_high", name="uq_user_match_pair"),
        CheckConstraint("sender_id <> receiver_id", name="chk_user_match_no_self"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pair_low: Mapped[uuid.UUID] = mapped_column(PgUUID(as_uuid=True), nullable=False)
    pair_high: Mapped[uuid.UUID] = mapped_column(PgUUID(as_uuid=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String, default=MatchStatus.PENDING.value, nullable=False,
        comment="pending / accepted / rejected",
    )
    match_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def involves(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def other_user_id(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.receiver_id if self.sender_id == user_id else self.sender_id

    def __repr__(self) -> str:
        return (
            f"<UserMatch {self.sender_id} -> {self.receiver_id} "
            f"status={self.status!r}>"
        )
