"""Shared pytest fixtures for FitMatch tests."""
import os

# Must be set before anything imports app.config.
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.repositories.memory import InMemoryRepository
from app.services.user_match_service import PairLocks


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def pair_locks():
    return PairLocks()


def _user_data(username, **overrides):
    data = {"username": username, "name": username.title()}
    data.update(overrides)
    return data


@pytest_asyncio.fixture
async def alice(repo):
    return await repo.create_user(_user_data(
        "alice",
        fitness_goals=["Weight Loss", "Cardio"],
        gym_preferences=["Pool"],
    ))


@pytest_asyncio.fixture
async def bob(repo):
    return await repo.create_user(_user_data("bob", fitness_goals=["Build Muscle"]))


@pytest_asyncio.fixture
async def carol(repo):
    return await repo.create_user(_user_data("carol"))


@pytest_asyncio.fixture
async def admin(repo):
    return await repo.create_user(_user_data("admin", is_admin=True))


@pytest_asyncio.fixture
async def gyms(repo):
    """Three gyms with clearly different amenity mixes."""
    return [
        await repo.create_gym({
            "name": "Iron Temple",
            "location": {"address": "1 Steel Rd", "city": "Austin", "state": "TX"},
            "amenities": ["Free Weights", "Personal Training"],
            "rating": 4.6,
        }),
        await repo.create_gym({
            "name": "Cardio Central",
            "location": {"address": "2 Run Ave", "city": "Austin", "state": "TX"},
            "amenities": ["Cardio Equipment", "Classes", "Sauna"],
            "rating": 4.1,
        }),
        await repo.create_gym({
            "name": "Quiet Corner",
            "location": {"address": "3 Calm St", "city": "Austin", "state": "TX"},
            "amenities": [],
        }),
    ]


def make_scope(repository):
    @asynccontextmanager
    async def scope():
        yield repository
    return scope


@pytest.fixture
def client(repo):
    """TestClient bound to the fixture repository, lifespan included."""
    from app.api.deps import get_repository_scope
    from app.main import app

    app.dependency_overrides[get_repository_scope] = lambda: make_scope(repo)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
