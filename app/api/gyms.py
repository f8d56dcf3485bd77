"""
FitMatch — Gyms API

Browsing the gym catalogue is open to every member; creating, editing and
removing gyms is admin-only.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_current_user, get_gym_service, require_admin
from app.models import Gym, User
from app.schemas.gym import GymCreate, GymResponse, GymUpdate
from app.services.gym_service import GymService

logger = structlog.get_logger("fitmatch.api.gyms")

router = APIRouter()


@router.get(
    "",
    response_model=list[GymResponse],
    summary="List gyms",
)
async def list_gyms(
    current_user: User = Depends(get_current_user),
    service: GymService = Depends(get_gym_service),
) -> list[Gym]:
    return await service.list_gyms()


@router.get(
    "/{gym_id}",
    response_model=GymResponse,
    summary="Get a gym",
)
async def get_gym(
    gym_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: GymService = Depends(get_gym_service),
) -> Gym:
    return await service.get_gym(gym_id)


# ──────────────────────────────────────────────────────────────────────────────
# Admin gym management
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=GymResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a gym (admin)",
)
async def create_gym(
    payload: GymCreate,
    admin: User = Depends(require_admin),
    service: GymService = Depends(get_gym_service),
) -> Gym:
    log = logger.bind(admin_id=str(admin.id), name=payload.name)
    log.info("create_gym_start")

    gym = await service.create_gym(payload, added_by=admin.id)

    log.info("create_gym_complete", gym_id=str(gym.id))
    return gym


@router.put(
    "/{gym_id}",
    response_model=GymResponse,
    summary="Update a gym (admin)",
)
async def update_gym(
    gym_id: uuid.UUID,
    payload: GymUpdate,
    admin: User = Depends(require_admin),
    service: GymService = Depends(get_gym_service),
) -> Gym:
    logger.info("update_gym_start", admin_id=str(admin.id), gym_id=str(gym_id))
    return await service.update_gym(gym_id, payload)


@router.delete(
    "/{gym_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a gym (admin)",
)
async def delete_gym(
    gym_id: uuid.UUID,
    admin: User = Depends(require_admin),
    service: GymService = Depends(get_gym_service),
) -> Response:
    logger.info("delete_gym_start", admin_id=str(admin.id), gym_id=str(gym_id))
    await service.delete_gym(gym_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
