"""
FitMatch — Admin Gym Import API

Bulk-load gyms from a CSV upload.  Valid rows are created; invalid rows are
reported back with their row number and skipped.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.deps import get_gym_service, require_admin
from app.config import get_settings
from app.models import User
from app.schemas.gym import CsvImportError, CsvImportResponse, GymResponse
from app.services.gym_service import GymService

logger = structlog.get_logger("fitmatch.api.admin.gyms")

router = APIRouter()


@router.post(
    "/import-csv",
    response_model=CsvImportResponse,
    summary="Import gyms from CSV",
)
async def import_gyms_csv(
    file: UploadFile = File(..., description="CSV with a header row"),
    admin: User = Depends(require_admin),
    service: GymService = Depends(get_gym_service),
) -> CsvImportResponse:
    """Columns: name, address, city, state, zipCode, latitude, longitude,
    amenities, images, rating.  ``amenities`` and ``images`` are
    comma-separated lists inside one quoted cell."""
    settings = get_settings()
    log = logger.bind(admin_id=str(admin.id), filename=file.filename)
    log.info("import_gyms_csv_start")

    content = await file.read()
    if len(content) > settings.CSV_MAX_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CSV file exceeds {settings.CSV_MAX_BYTES} bytes",
        )
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="CSV file must be UTF-8 encoded",
        )

    result = await service.import_gyms_csv(text, added_by=admin.id)
    imported = result["imported"]
    errors = result["errors"]

    log.info(
        "import_gyms_csv_complete",
        processed=result["processed"],
        imported=len(imported),
        failed=len(errors),
    )
    return CsvImportResponse(
        success=True,
        message=f"Successfully imported {len(imported)} gyms",
        processed=result["processed"],
        imported=[GymResponse.model_validate(gym) for gym in imported],
        errors=[CsvImportError(**error) for error in errors],
    )
