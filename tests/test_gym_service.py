"""Unit tests for GymService — catalogue, recommendations, favourites, CSV import."""
import uuid

import pytest

from app.errors import NotFoundError, ValidationError
from app.schemas.gym import GymCreate, GymLocation, GymUpdate
from app.services.gym_service import GymService


@pytest.fixture
def service(repo):
    return GymService(repo)


CSV_HEADER = "name,address,city,state,zipCode,latitude,longitude,amenities,images,rating\n"


class TestCatalogue:

    @pytest.mark.asyncio
    async def test_create_and_get(self, service, admin):
        created = await service.create_gym(
            GymCreate(name="Lift Lab", location=GymLocation(city="Austin"), amenities=["Sauna"]),
            added_by=admin.id,
        )
        fetched = await service.get_gym(created.id)
        assert fetched.name == "Lift Lab"
        assert fetched.location["city"] == "Austin"
        assert fetched.added_by == admin.id
        assert fetched.rating is None

    @pytest.mark.asyncio
    async def test_partial_update(self, service, gyms):
        gym = gyms[0]
        updated = await service.update_gym(gym.id, GymUpdate(rating=3.5))
        assert updated.rating == 3.5
        assert updated.name == "Iron Temple"
        assert updated.amenities == ["Free Weights", "Personal Training"]

    @pytest.mark.asyncio
    async def test_update_null_amenities_becomes_empty(self, service, gyms):
        updated = await service.update_gym(gyms[0].id, GymUpdate(amenities=None))
        assert updated.amenities == []

    @pytest.mark.asyncio
    async def test_missing_gym(self, service):
        with pytest.raises(NotFoundError):
            await service.get_gym(uuid.uuid4())
        with pytest.raises(NotFoundError):
            await service.update_gym(uuid.uuid4(), GymUpdate(name="x"))
        with pytest.raises(NotFoundError):
            await service.delete_gym(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_removes_saved_entries(self, service, repo, alice, gyms):
        await service.save_gym(alice.id, gyms[0].id)
        await service.delete_gym(gyms[0].id)
        assert await repo.get_saved_gyms_by_user(alice.id) == []


class TestRecommendations:

    @pytest.mark.asyncio
    async def test_ranked_for_goals(self, service, alice, gyms):
        ranked = await service.recommend(alice.id)
        assert [(g.name, s) for g, s in ranked] == [
            ("Cardio Central", 89),
            ("Iron Temple", 70),
            ("Quiet Corner", 70),
        ]

    @pytest.mark.asyncio
    async def test_build_muscle_profile(self, service, bob, gyms):
        ranked = await service.recommend(bob.id)
        assert ranked[0][0].name == "Iron Temple"
        assert ranked[0][1] == 96

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, gyms):
        with pytest.raises(NotFoundError):
            await service.recommend(uuid.uuid4())


class TestSavedGyms:

    @pytest.mark.asyncio
    async def test_save_snapshots_current_score(self, service, alice, gyms):
        saved, gym = await service.save_gym(alice.id, gyms[1].id)
        assert gym.id == gyms[1].id
        assert saved.match_score == 89

    @pytest.mark.asyncio
    async def test_explicit_score_kept(self, service, alice, gyms):
        saved, _ = await service.save_gym(alice.id, gyms[0].id, match_score=42)
        assert saved.match_score == 42

    @pytest.mark.asyncio
    async def test_save_is_idempotent(self, service, alice, gyms):
        first, _ = await service.save_gym(alice.id, gyms[0].id)
        second, _ = await service.save_gym(alice.id, gyms[0].id)
        assert first.id == second.id
        assert len(await service.list_saved_gyms(alice.id)) == 1

    @pytest.mark.asyncio
    async def test_list_joins_gym(self, service, alice, gyms):
        await service.save_gym(alice.id, gyms[0].id)
        await service.save_gym(alice.id, gyms[2].id)
        joined = await service.list_saved_gyms(alice.id)
        assert {gym.name for _, gym in joined} == {"Iron Temple", "Quiet Corner"}

    @pytest.mark.asyncio
    async def test_unsave(self, service, alice, gyms):
        await service.save_gym(alice.id, gyms[0].id)
        await service.unsave_gym(alice.id, gyms[0].id)
        assert await service.list_saved_gyms(alice.id) == []
        with pytest.raises(NotFoundError):
            await service.unsave_gym(alice.id, gyms[0].id)

    @pytest.mark.asyncio
    async def test_save_unknown_gym(self, service, alice):
        with pytest.raises(NotFoundError):
            await service.save_gym(alice.id, uuid.uuid4())


class TestCsvImport:

    @pytest.mark.asyncio
    async def test_valid_rows_imported(self, service, admin):
        text = CSV_HEADER + (
            'Lift Lab,1 Main St,Austin,TX,78701,30.27,-97.74,"Free Weights, Sauna","a.jpg,b.jpg",4.5\n'
            'Row House,2 Elm St,Austin,TX,78702,,,Rowing Machines,,\n'
        )
        result = await service.import_gyms_csv(text, added_by=admin.id)

        assert result["processed"] == 2
        assert result["errors"] == []
        first, second = result["imported"]
        assert first.amenities == ["Free Weights", "Sauna"]
        assert first.images == ["a.jpg", "b.jpg"]
        assert first.rating == 4.5
        assert first.location["zip_code"] == "78701"
        assert first.location["lat"] == 30.27
        assert first.added_by == admin.id
        assert second.rating is None
        assert second.location["lat"] == 0.0

    @pytest.mark.asyncio
    async def test_invalid_rows_reported_and_skipped(self, service, repo, admin):
        text = CSV_HEADER + (
            ",1 Main St,Austin,TX,78701,30.27,-97.74,,,\n"
            "Good Gym,2 Elm St,Austin,TX,78702,30.2,-97.7,Sauna,,4\n"
            "Bad Rating,3 Oak St,Austin,TX,78703,30.2,-97.7,,,9\n"
            "Bad Lat,4 Pine St,Austin,TX,78704,north,-97.7,,,\n"
        )
        result = await service.import_gyms_csv(text, added_by=admin.id)

        assert result["processed"] == 4
        assert [g.name for g in result["imported"]] == ["Good Gym"]
        assert [e["row"] for e in result["errors"]] == [1, 3, 4]
        assert result["errors"][1]["data"]["name"] == "Bad Rating"
        assert len(await repo.get_all_gyms()) == 1

    @pytest.mark.asyncio
    async def test_header_without_name_column(self, service, admin):
        with pytest.raises(ValidationError):
            await service.import_gyms_csv("title,city\nX,Austin\n", added_by=admin.id)
