"""
FastAPI router for phone brands.

Key Endpoints:
- GET    /phone-brands          list, highest percentage first
- POST   /phone-brands          create (admin)
- PUT    /phone-brands/{id}     partial update (admin)
- DELETE /phone-brands/{id}     delete (admin)

A duplicate brand name is reported as 400 "Phone brand name already exists".
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from renew_admin.core.dependencies import AdminUserDep, BrandServiceDep
from renew_admin.core.errors import DuplicateNameError, StoreError, ValidationError
from renew_admin.models.schemas import (
    MessageResponse,
    PhoneBrand,
    PhoneBrandCreate,
    PhoneBrandUpdate,
)


logger = logging.getLogger(__name__)

router = APIRouter()

BRAND_NOT_FOUND = "Phone brand not found"


@router.get("", response_model=List[PhoneBrand])
async def list_phone_brands(service: BrandServiceDep) -> List[PhoneBrand]:
    try:
        return await service.list_brands()
    except Exception as e:
        logger.error(f"Error fetching phone brands: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch phone brands")


@router.post("", response_model=PhoneBrand, status_code=201)
async def create_phone_brand(
    body: PhoneBrandCreate,
    service: BrandServiceDep,
    admin: AdminUserDep,
) -> PhoneBrand:
    try:
        return await service.create_brand(body.name, body.percentage)
    except (ValidationError, DuplicateNameError) as e:
        logger.warning(f"POST /phone-brands rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.error(f"Error adding phone brand: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add phone brand")


@router.put("/{brand_id}", response_model=PhoneBrand)
async def update_phone_brand(
    brand_id: int,
    body: PhoneBrandUpdate,
    service: BrandServiceDep,
    admin: AdminUserDep,
) -> PhoneBrand:
    try:
        brand = await service.update_brand(brand_id, body.name, body.percentage)
    except (ValidationError, DuplicateNameError) as e:
        logger.warning(f"PUT /phone-brands/{brand_id} rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.error(f"Error updating phone brand {brand_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update phone brand")

    if brand is None:
        raise HTTPException(status_code=404, detail=BRAND_NOT_FOUND)
    return brand


@router.delete("/{brand_id}", response_model=MessageResponse)
async def delete_phone_brand(
    brand_id: int,
    service: BrandServiceDep,
    admin: AdminUserDep,
) -> MessageResponse:
    try:
        deleted = await service.delete_brand(brand_id)
    except Exception as e:
        logger.error(f"Error deleting phone brand {brand_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete phone brand")

    if not deleted:
        raise HTTPException(status_code=404, detail=BRAND_NOT_FOUND)
    return MessageResponse(message="Phone brand deleted successfully")


__all__ = ["router"]
