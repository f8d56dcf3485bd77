"""
FitMatch — Gym catalogue, recommendations and favourites.

Wraps the repository with the gym-facing operations: admin CRUD, the
scorer-ranked recommendation list, saved gyms (with a score snapshot taken
at save time) and the admin CSV bulk import.
"""

from __future__ import annotations

import csv
import io
import uuid
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from app.errors import NotFoundError, ValidationError
from app.models import Gym, SavedGym
from app.repositories.base import Repository
from app.schemas.gym import GymCreate, GymUpdate
from app.services.gym_scorer import GymScorer

logger = structlog.get_logger("fitmatch.gym_service")

CSV_COLUMNS = (
    "name", "address", "city", "state", "zipCode",
    "latitude", "longitude", "amenities", "images", "rating",
)


def _split_cell(value: str | None) -> list[str]:
    """``"Pool, Sauna,"`` -> ``["Pool", "Sauna"]``."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _csv_row_to_gym(row: dict[str, Any]) -> GymCreate:
    rating = (row.get("rating") or "").strip()
    return GymCreate.model_validate({
        "name": (row.get("name") or "").strip(),
        "location": {
            "address": (row.get("address") or "").strip(),
            "city": (row.get("city") or "").strip(),
            "state": (row.get("state") or "").strip(),
            "zip_code": (row.get("zipCode") or "").strip(),
            "lat": (row.get("latitude") or "").strip() or 0.0,
            "lng": (row.get("longitude") or "").strip() or 0.0,
        },
        "amenities": _split_cell(row.get("amenities")),
        "images": _split_cell(row.get("images")),
        "rating": rating or None,
    })


def _describe_row_error(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


class GymService:
    def __init__(self, repository: Repository, scorer: GymScorer | None = None) -> None:
        self.repository = repository
        self.scorer = scorer or GymScorer()

    # ── Catalogue ─────────────────────────────────────────────────────────

    async def list_gyms(self) -> list[Gym]:
        return await self.repository.get_all_gyms()

    async def get_gym(self, gym_id: uuid.UUID) -> Gym:
        gym = await self.repository.get_gym(gym_id)
        if gym is None:
            raise NotFoundError("Gym not found")
        return gym

    async def create_gym(self, data: GymCreate, added_by: uuid.UUID | None = None) -> Gym:
        payload = data.model_dump()
        payload["added_by"] = added_by
        gym = await self.repository.create_gym(payload)
        logger.info("gym_created", gym_id=str(gym.id), added_by=str(added_by))
        return gym

    async def update_gym(self, gym_id: uuid.UUID, data: GymUpdate) -> Gym:
        changes = data.model_dump(exclude_unset=True)
        # Lists are never stored as NULL.
        for field in ("images", "amenities"):
            if field in changes and changes[field] is None:
                changes[field] = []
        if "name" in changes and changes["name"] is None:
            del changes["name"]
        if "location" in changes and changes["location"] is None:
            del changes["location"]

        gym = await self.repository.update_gym(gym_id, changes)
        if gym is None:
            raise NotFoundError("Gym not found")
        logger.info("gym_updated", gym_id=str(gym_id), fields=sorted(changes))
        return gym

    async def delete_gym(self, gym_id: uuid.UUID) -> None:
        if not await self.repository.delete_gym(gym_id):
            raise NotFoundError("Gym not found")
        logger.info("gym_deleted", gym_id=str(gym_id))

    # ── Recommendations ───────────────────────────────────────────────────

    async def recommend(self, user_id: uuid.UUID) -> list[tuple[Gym, int]]:
        """All gyms ranked by match score for the user, best first."""
        user = await self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")

        gyms = await self.repository.get_all_gyms()
        ranked = self.scorer.rank(user, gyms)
        logger.info(
            "recommendations_built",
            user_id=str(user_id),
            gym_count=len(ranked),
            top_score=ranked[0][1] if ranked else None,
        )
        return ranked

    # ── Saved gyms ────────────────────────────────────────────────────────

    async def save_gym(
        self,
        user_id: uuid.UUID,
        gym_id: uuid.UUID,
        match_score: int | None = None,
    ) -> tuple[SavedGym, Gym]:
        """Favourite a gym.  Without an explicit score the current scorer
        output is stored as the snapshot."""
        gym = await self.get_gym(gym_id)

        if match_score is None:
            user = await self.repository.get_user(user_id)
            if user is None:
                raise NotFoundError("User not found")
            match_score = self.scorer.score(user, gym)

        saved = await self.repository.save_gym(user_id, gym_id, match_score=match_score)
        logger.info(
            "gym_saved",
            user_id=str(user_id),
            gym_id=str(gym_id),
            match_score=match_score,
        )
        return saved, gym

    async def list_saved_gyms(self, user_id: uuid.UUID) -> list[tuple[SavedGym, Gym]]:
        saved_gyms = await self.repository.get_saved_gyms_by_user(user_id)
        joined: list[tuple[SavedGym, Gym]] = []
        for saved in saved_gyms:
            gym = await self.repository.get_gym(saved.gym_id)
            if gym is not None:
                joined.append((saved, gym))
        return joined

    async def unsave_gym(self, user_id: uuid.UUID, gym_id: uuid.UUID) -> None:
        if not await self.repository.delete_saved_gym(user_id, gym_id):
            raise NotFoundError("Saved gym not found")
        logger.info("gym_unsaved", user_id=str(user_id), gym_id=str(gym_id))

    # ── CSV import ────────────────────────────────────────────────────────

    async def import_gyms_csv(self, text: str, added_by: uuid.UUID | None = None) -> dict[str, Any]:
        """Create one gym per valid CSV row.

        Expected header: ``name,address,city,state,zipCode,latitude,longitude,
        amenities,images,rating``.  ``amenities`` and ``images`` hold
        comma-separated lists inside a quoted cell.  Invalid rows are skipped
        and reported with their 1-based data row number.

        Returns
        -------
        dict
            ``{"processed": int, "imported": list[Gym], "errors": list[dict]}``
        """
        log = logger.bind(added_by=str(added_by))
        reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
        if not reader.fieldnames or "name" not in reader.fieldnames:
            raise ValidationError("CSV header must include: " + ", ".join(CSV_COLUMNS))

        imported: list[Gym] = []
        errors: list[dict[str, Any]] = []
        processed = 0

        for row_number, row in enumerate(reader, start=1):
            processed += 1
            raw = {key: value for key, value in row.items() if key is not None}
            try:
                data = _csv_row_to_gym(raw)
            except PydanticValidationError as exc:
                errors.append({"row": row_number, "error": _describe_row_error(exc), "data": raw})
                continue
            imported.append(await self.create_gym(data, added_by=added_by))

        log.info(
            "gyms_csv_imported",
            processed=processed,
            imported=len(imported),
            failed=len(errors),
        )
        return {"processed": processed, "imported": imported, "errors": errors}
