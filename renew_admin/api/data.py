"""
FastAPI router for the hierarchy data: import, distributions, details and
percentage overrides.

Key Endpoints:
- POST   /data/import                    replace the data set from a workbook (admin)
- GET    /data/b1                        distinct B1 values
- GET    /data/b2?b1=                    B2 distribution under a B1
- GET    /data/b3?b1=&b2=                B3 distribution under a B1/B2 pair
- GET    /data/b3/details?b1=&b2=&b3=    raw non-empty details
- GET    /data/b3/details/grouped        grouped details with percentages
- PUT    /data/b2/percentage             configure a B2 percentage (admin)
- PUT    /data/b3/percentage             configure a B3 percentage (admin)
- PUT    /data/b3/details/percentage     configure a detail percentage (admin)
- DELETE /data/configurations            remove every configured percentage (admin)
- DELETE /data                           remove all entries and percentages (admin)

Distribution reads are lenient: a missing b1/b2 yields an empty list. The
detail reads require all three path components.

Error Mapping:
- ValidationError -> 400
- StoreError -> 500 with the store's message
- anything else -> 500, logged with traceback
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from renew_admin.core.dependencies import (
    AdminUserDep,
    AggregationEngineDep,
    DetailEngineDep,
    ImportServiceDep,
    SettingsDep,
)
from renew_admin.core.errors import StoreError, ValidationError
from renew_admin.models.enums import Level, ScopeType
from renew_admin.models.schemas import (
    AggregateRow,
    B2PercentageUpdate,
    B3PercentageUpdate,
    DetailPercentageUpdate,
    DetailRow,
    ImportResponse,
    MessageResponse,
)
from renew_admin.services.aggregation import is_blank
from renew_admin.services.ingestion import parse_spreadsheet


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()

DETAIL_PARAMS_REQUIRED = "B1, B2, and B3 parameters are required"


def _server_error(action: str, error: Exception) -> HTTPException:
    """Log an unexpected failure and build the 500 response for it."""
    if isinstance(error, StoreError):
        logger.error(f"{action}: {error.message}")
        return HTTPException(status_code=500, detail=error.message)
    logger.error(f"{action}: {str(error)}", exc_info=True)
    return HTTPException(status_code=500, detail=action)


# =============================================================================
# Import
# =============================================================================

@router.post("/import", response_model=ImportResponse)
async def import_data(
    service: ImportServiceDep,
    settings: SettingsDep,
    admin: AdminUserDep,
    file: Optional[UploadFile] = File(None),
) -> ImportResponse:
    """
    Replace the whole data set with the rows of an uploaded workbook.

    Every existing entry and configured percentage is removed.

    Raises:
        HTTPException 400: No file, unreadable file, or missing B1/B2/B3 columns.
        HTTPException 413: File larger than ``max_upload_bytes``.
        HTTPException 500: The store failed.
    """
    if file is None:
        logger.warning("POST /data/import rejected: no file uploaded")
        raise HTTPException(status_code=400, detail="No file uploaded")

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        logger.warning(f"POST /data/import rejected: {len(content)} bytes")
        raise HTTPException(status_code=413, detail="File too large")

    try:
        entries = parse_spreadsheet(content, file.filename, settings.detail_column)
        count = await service.replace_all_entries(entries)
    except ValidationError as e:
        logger.warning(f"POST /data/import rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to import data", e)

    logger.info(f"Imported {count} entries by {admin.username}")
    return ImportResponse(message="Data imported successfully", count=count)


# =============================================================================
# Reads
# =============================================================================

@router.get("/b1", response_model=List[str])
async def get_b1_values(engine: AggregationEngineDep) -> List[str]:
    try:
        return await engine.list_top_level_values()
    except Exception as e:
        raise _server_error("Failed to fetch B1 values", e)


@router.get("/b2", response_model=List[AggregateRow])
async def get_b2_data(
    engine: AggregationEngineDep,
    b1: Optional[str] = Query(None),
) -> List[AggregateRow]:
    try:
        return await engine.get_child_distribution(Level.B2, b1)
    except Exception as e:
        raise _server_error("Failed to fetch B2 data", e)


@router.get("/b3", response_model=List[AggregateRow])
async def get_b3_data(
    engine: AggregationEngineDep,
    b1: Optional[str] = Query(None),
    b2: Optional[str] = Query(None),
) -> List[AggregateRow]:
    try:
        return await engine.get_child_distribution(Level.B3, b1, b2)
    except Exception as e:
        raise _server_error("Failed to fetch B3 data", e)


@router.get("/b3/details", response_model=List[str])
async def get_b3_details(
    engine: DetailEngineDep,
    b1: Optional[str] = Query(None),
    b2: Optional[str] = Query(None),
    b3: Optional[str] = Query(None),
) -> List[str]:
    if is_blank(b1) or is_blank(b2) or is_blank(b3):
        raise HTTPException(status_code=400, detail=DETAIL_PARAMS_REQUIRED)
    try:
        return await engine.get_raw_details(b1, b2, b3)
    except Exception as e:
        raise _server_error("Failed to fetch B3 details", e)


@router.get("/b3/details/grouped", response_model=List[DetailRow])
async def get_grouped_b3_details(
    engine: DetailEngineDep,
    b1: Optional[str] = Query(None),
    b2: Optional[str] = Query(None),
    b3: Optional[str] = Query(None),
) -> List[DetailRow]:
    """
    Details under one B1/B2/B3 path grouped by trimmed text.

    Example Response:
        [
            {"detail": "A", "count": 3, "totalCount": 4, "percentage": 75.0,
             "configuredPercentage": null},
            {"detail": "B", "count": 1, "totalCount": 4, "percentage": 25.0,
             "configuredPercentage": 40}
        ]
    """
    if is_blank(b1) or is_blank(b2) or is_blank(b3):
        raise HTTPException(status_code=400, detail=DETAIL_PARAMS_REQUIRED)
    try:
        return await engine.get_grouped_details(b1, b2, b3)
    except Exception as e:
        raise _server_error("Failed to fetch grouped B3 details", e)


# =============================================================================
# Percentage Overrides
# =============================================================================

@router.put("/b2/percentage", response_model=MessageResponse)
async def update_b2_percentage(
    body: B2PercentageUpdate,
    engine: AggregationEngineDep,
    admin: AdminUserDep,
) -> MessageResponse:
    if is_blank(body.b1) or is_blank(body.value) or body.percentage is None:
        logger.warning(f"PUT /data/b2/percentage rejected: {body.model_dump()}")
        raise HTTPException(status_code=400, detail="B1, value and percentage are required")

    try:
        await engine.set_override(ScopeType.B2, (body.b1,), body.value, body.percentage)
    except ValidationError as e:
        logger.warning(f"PUT /data/b2/percentage rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to update B2 percentage", e)

    return MessageResponse(message="B2 percentage updated successfully")


@router.put("/b3/percentage", response_model=MessageResponse)
async def update_b3_percentage(
    body: B3PercentageUpdate,
    engine: AggregationEngineDep,
    admin: AdminUserDep,
) -> MessageResponse:
    if is_blank(body.b1) or is_blank(body.b2) or is_blank(body.value) or body.percentage is None:
        logger.warning(f"PUT /data/b3/percentage rejected: {body.model_dump()}")
        raise HTTPException(status_code=400, detail="B1, B2, value and percentage are required")

    try:
        await engine.set_override(
            ScopeType.B3, (body.b1, body.b2), body.value, body.percentage
        )
    except ValidationError as e:
        logger.warning(f"PUT /data/b3/percentage rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to update B3 percentage", e)

    return MessageResponse(message="B3 percentage updated successfully")


@router.put("/b3/details/percentage", response_model=MessageResponse)
async def update_detail_percentage(
    body: DetailPercentageUpdate,
    engine: DetailEngineDep,
    admin: AdminUserDep,
) -> MessageResponse:
    if (
        is_blank(body.b1) or is_blank(body.b2) or is_blank(body.b3)
        or is_blank(body.detail) or body.percentage is None
    ):
        logger.warning(f"PUT /data/b3/details/percentage rejected: {body.model_dump()}")
        raise HTTPException(
            status_code=400,
            detail="B1, B2, B3, detail and percentage are required",
        )

    try:
        await engine.set_detail_override(
            body.b1, body.b2, body.b3, body.detail, body.percentage
        )
    except ValidationError as e:
        logger.warning(f"PUT /data/b3/details/percentage rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to update detail percentage", e)

    return MessageResponse(message="Detail percentage updated successfully")


@router.delete("/configurations", response_model=MessageResponse)
async def clear_configurations(
    engine: AggregationEngineDep,
    admin: AdminUserDep,
) -> MessageResponse:
    try:
        await engine.clear_all_overrides()
    except Exception as e:
        raise _server_error("Failed to clear configurations", e)

    return MessageResponse(message="All percentage configurations cleared successfully")


@router.delete("", response_model=MessageResponse)
async def clear_data(
    service: ImportServiceDep,
    admin: AdminUserDep,
) -> MessageResponse:
    try:
        await service.clear_all_data()
    except Exception as e:
        raise _server_error("Failed to clear data", e)

    return MessageResponse(message="All data cleared successfully")


__all__ = ["router"]
