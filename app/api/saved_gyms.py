"""
FitMatch — Recommendations & Saved Gyms API

``/recommendations`` ranks every gym against the caller's fitness goals and
gym preferences; ``/saved-gyms`` manages the caller's favourites, each
carrying the match score it had when saved.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_current_user, get_gym_service
from app.models import User
from app.schemas.gym import GymRecommendation, GymResponse, SavedGymCreate, SavedGymResponse
from app.services.gym_service import GymService

logger = structlog.get_logger("fitmatch.api.saved_gyms")

recommendations_router = APIRouter()
router = APIRouter()


def _saved_response(saved, gym) -> SavedGymResponse:
    response = SavedGymResponse.model_validate(saved)
    response.gym = GymResponse.model_validate(gym)
    return response


# ──────────────────────────────────────────────────────────────────────────────
# GET /recommendations — Ranked gyms for the caller
# ──────────────────────────────────────────────────────────────────────────────

@recommendations_router.get(
    "",
    response_model=list[GymRecommendation],
    summary="Gym recommendations",
)
async def get_recommendations(
    current_user: User = Depends(get_current_user),
    service: GymService = Depends(get_gym_service),
) -> list[GymRecommendation]:
    """Every gym with its 0-100 match score, best match first."""
    log = logger.bind(user_id=str(current_user.id))
    log.info("recommendations_start")

    ranked = await service.recommend(current_user.id)

    log.info("recommendations_complete", gym_count=len(ranked))
    return [
        GymRecommendation(gym=GymResponse.model_validate(gym), score=score)
        for gym, score in ranked
    ]


# ──────────────────────────────────────────────────────────────────────────────
# Saved gyms
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[SavedGymResponse],
    summary="List saved gyms",
)
async def list_saved_gyms(
    current_user: User = Depends(get_current_user),
    service: GymService = Depends(get_gym_service),
) -> list[SavedGymResponse]:
    joined = await service.list_saved_gyms(current_user.id)
    return [_saved_response(saved, gym) for saved, gym in joined]


@router.post(
    "",
    response_model=SavedGymResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a gym",
)
async def save_gym(
    payload: SavedGymCreate,
    current_user: User = Depends(get_current_user),
    service: GymService = Depends(get_gym_service),
) -> SavedGymResponse:
    """Favourite a gym.  Saving the same gym twice keeps one record."""
    log = logger.bind(user_id=str(current_user.id), gym_id=str(payload.gym_id))
    log.info("save_gym_start")

    saved, gym = await service.save_gym(
        current_user.id, payload.gym_id, match_score=payload.match_score
    )

    log.info("save_gym_complete", match_score=saved.match_score)
    return _saved_response(saved, gym)


@router.delete(
    "/{gym_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Remove a saved gym",
)
async def unsave_gym(
    gym_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: GymService = Depends(get_gym_service),
) -> Response:
    await service.unsave_gym(current_user.id, gym_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
