"""
FitMatch — Shared API dependencies.

Wires the storage backend, the acting user and the services into FastAPI's
dependency injection.  Identity comes from the upstream auth layer as the
``X-User-Id`` header; this service only resolves and checks it.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import Depends, Header, HTTPException, WebSocket, status

from app.config import get_settings
from app.models import User
from app.repositories.base import Repository
from app.repositories.memory import InMemoryRepository
from app.services.gym_service import GymService
from app.services.message_service import MessageService
from app.services.realtime_gateway import RealtimeGateway, RepositoryScope
from app.services.user_match_service import UserMatchService
from app.services.user_service import UserService

logger = structlog.get_logger("fitmatch.api.deps")

_memory_repository: InMemoryRepository | None = None


def get_memory_repository() -> InMemoryRepository:
    """Process-wide in-memory store, created on first use."""
    global _memory_repository
    if _memory_repository is None:
        _memory_repository = InMemoryRepository()
        logger.info("memory_repository_created")
    return _memory_repository


@asynccontextmanager
async def repository_scope() -> AsyncIterator[Repository]:
    """One unit of work: commit on success, roll back on error."""
    if get_settings().uses_memory_storage:
        yield get_memory_repository()
        return

    from app.database import async_session_factory
    from app.repositories.sql import SqlAlchemyRepository

    async with async_session_factory() as session:
        try:
            yield SqlAlchemyRepository(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_repository_scope() -> RepositoryScope:
    return repository_scope


async def get_repository(
    scope: RepositoryScope = Depends(get_repository_scope),
) -> AsyncIterator[Repository]:
    async with scope() as repository:
        yield repository


# ──────────────────────────────────────────────────────────────────────────────
# Acting user
# ──────────────────────────────────────────────────────────────────────────────

async def get_current_user(
    x_user_id: str | None = Header(None),
    repository: Repository = Depends(get_repository),
) -> User:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity",
        )

    user = await repository.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    if user.is_banned:
        logger.warning("banned_user_request", user_id=str(user_id))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been banned",
        )
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


# ──────────────────────────────────────────────────────────────────────────────
# Services
# ──────────────────────────────────────────────────────────────────────────────

def get_user_service(repository: Repository = Depends(get_repository)) -> UserService:
    return UserService(repository)


def get_gym_service(repository: Repository = Depends(get_repository)) -> GymService:
    return GymService(repository)


def get_user_match_service(repository: Repository = Depends(get_repository)) -> UserMatchService:
    return UserMatchService(repository)


def get_message_service(repository: Repository = Depends(get_repository)) -> MessageService:
    return MessageService(repository)


def get_realtime_gateway(
    websocket: WebSocket,
    scope: RepositoryScope = Depends(get_repository_scope),
) -> RealtimeGateway:
    return RealtimeGateway(websocket.app.state.connection_registry, scope)
