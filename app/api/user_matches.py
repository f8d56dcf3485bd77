"""
FitMatch — User Matches API

Training-partner requests between members.  A request to someone who has
already asked you turns into an accepted match straight away.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_current_user, get_repository, get_user_match_service
from app.models import User, UserMatch
from app.repositories.base import Repository
from app.schemas.match import (
    UserMatchCreate,
    UserMatchListItem,
    UserMatchRespond,
    UserMatchResponse,
)
from app.schemas.user import PublicUserResponse
from app.services.user_match_service import UserMatchService

logger = structlog.get_logger("fitmatch.api.user_matches")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET / — Caller's matches
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=list[UserMatchListItem],
    summary="List my matches",
)
async def list_matches(
    match_status: str | None = Query(
        None,
        alias="status",
        description="Filter by status: pending, accepted, rejected",
    ),
    current_user: User = Depends(get_current_user),
    service: UserMatchService = Depends(get_user_match_service),
    repository: Repository = Depends(get_repository),
) -> list[UserMatchListItem]:
    """Matches where the caller is sender or receiver, newest first, each
    with the other member's public profile."""
    matches = await service.list_matches(current_user.id, match_status)

    items: list[UserMatchListItem] = []
    for match in matches:
        item = UserMatchListItem.model_validate(match)
        other = await repository.get_user(match.other_user_id(current_user.id))
        if other is not None:
            item.other_user = PublicUserResponse.model_validate(other)
        items.append(item)
    return items


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Request a match
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=UserMatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a match",
)
async def request_match(
    payload: UserMatchCreate,
    current_user: User = Depends(get_current_user),
    service: UserMatchService = Depends(get_user_match_service),
) -> UserMatch:
    log = logger.bind(sender_id=str(current_user.id), receiver_id=str(payload.receiver_id))
    log.info("request_match_start")

    if payload.sender_id is not None and payload.sender_id != current_user.id:
        log.warning("request_match_impersonation")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only create matches as yourself",
        )

    match = await service.request_match(
        current_user.id, payload.receiver_id, match_score=payload.match_score
    )

    log.info("request_match_complete", match_id=str(match.id), status=match.status)
    return match


# ──────────────────────────────────────────────────────────────────────────────
# PUT /{match_id} — Accept or reject
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/{match_id}",
    response_model=UserMatchResponse,
    summary="Respond to a match",
)
async def respond_to_match(
    match_id: uuid.UUID,
    payload: UserMatchRespond,
    current_user: User = Depends(get_current_user),
    service: UserMatchService = Depends(get_user_match_service),
) -> UserMatch:
    """Only the receiver of a pending match may accept or reject it."""
    return await service.respond_to_match(match_id, current_user.id, payload.status)


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{match_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{match_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a match",
)
async def delete_match(
    match_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: UserMatchService = Depends(get_user_match_service),
) -> Response:
    await service.delete_match(match_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
