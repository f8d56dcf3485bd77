"""
FitMatch — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from app.models.user import User
from app.models.gym import Gym, SavedGym
from app.models.match import MatchStatus, UserMatch, canonical_pair
from app.models.message import Message

__all__ = [
    "User",
    "Gym",
    "SavedGym",
    "MatchStatus",
    "UserMatch",
    "canonical_pair",
    "Message",
]
