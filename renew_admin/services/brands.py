"""
Phone brand CRUD.

Brands are named entities with a percentage. Listings are always ordered by
percentage descending with ties in creation order, and are cached under the
``phoneBrands`` key until the next write.
"""

import logging
from typing import Any, List, Optional

import asyncpg

from renew_admin.core.cache import PHONE_BRANDS_CATEGORY, TTLCache
from renew_admin.core.database import get_db_pool, rows_affected
from renew_admin.core.errors import DuplicateNameError, StoreError, ValidationError
from renew_admin.models.schemas import PhoneBrand
from renew_admin.services.aggregation import check_percentage, is_blank
from renew_admin.services.stores import DB_ERRORS, describe_store_error, normalize_percentage
from renew_admin.sql.brand_queries import (
    DELETE_BRAND,
    INSERT_BRAND,
    LIST_BRANDS,
    UPDATE_BRAND,
)


logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "Phone brand name already exists"


def _record_to_brand(row) -> PhoneBrand:
    return PhoneBrand(
        id=row['id'],
        name=row['name'],
        percentage=normalize_percentage(row['percentage']),
    )


class BrandService:
    """
    Args:
        cache: Shared TTLCache from the application state.
        ttl: Lifetime in seconds of the cached listing.
    """

    def __init__(self, cache: TTLCache, ttl: float = 300.0):
        self.cache = cache
        self.ttl = ttl

    def _invalidate(self) -> None:
        self.cache.invalidate_path(PHONE_BRANDS_CATEGORY)

    async def list_brands(self) -> List[PhoneBrand]:
        key = TTLCache.make_key(PHONE_BRANDS_CATEGORY)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(LIST_BRANDS)
        except DB_ERRORS as e:
            logger.error(f"Failed to list phone brands: {e}")
            raise StoreError(describe_store_error(e)) from e

        brands = [_record_to_brand(row) for row in rows]
        self.cache.set(key, brands, ttl=self.ttl)
        return list(brands)

    async def create_brand(self, name: Optional[str], percentage: Any) -> PhoneBrand:
        """
        Raises:
            ValidationError: Missing name or percentage, or non-numeric percentage.
            DuplicateNameError: A brand with this name exists.
            StoreError: Any other write failure.
        """
        if is_blank(name) or percentage is None:
            raise ValidationError("Name and percentage are required")
        percentage = check_percentage(percentage)
        name = name.strip()

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(INSERT_BRAND, name, float(percentage))
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Duplicate phone brand name: {name}")
            raise DuplicateNameError(DUPLICATE_NAME_MESSAGE, {'name': name}) from e
        except DB_ERRORS as e:
            logger.error(f"Failed to add phone brand {name}: {e}")
            raise StoreError(describe_store_error(e), {'name': name}) from e

        self._invalidate()
        logger.info(f"Added phone brand {name} = {percentage}")
        return _record_to_brand(row)

    async def update_brand(
        self,
        brand_id: int,
        name: Optional[str] = None,
        percentage: Any = None,
    ) -> Optional[PhoneBrand]:
        """
        Update the given fields; omitted fields keep their values.

        Returns:
            The updated brand, or None if no brand has ``brand_id``.
        """
        if name is not None:
            if is_blank(name):
                raise ValidationError("Name must not be empty")
            name = name.strip()
        if percentage is not None:
            percentage = float(check_percentage(percentage))

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(UPDATE_BRAND, brand_id, name, percentage)
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Duplicate phone brand name on update: {name}")
            raise DuplicateNameError(DUPLICATE_NAME_MESSAGE, {'name': name}) from e
        except DB_ERRORS as e:
            logger.error(f"Failed to update phone brand {brand_id}: {e}")
            raise StoreError(describe_store_error(e), {'id': brand_id}) from e

        if row is None:
            return None

        self._invalidate()
        logger.info(f"Updated phone brand {brand_id}")
        return _record_to_brand(row)

    async def delete_brand(self, brand_id: int) -> bool:
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                status = await conn.execute(DELETE_BRAND, brand_id)
        except DB_ERRORS as e:
            logger.error(f"Failed to delete phone brand {brand_id}: {e}")
            raise StoreError(describe_store_error(e), {'id': brand_id}) from e

        deleted = rows_affected(status) > 0
        if deleted:
            self._invalidate()
            logger.info(f"Deleted phone brand {brand_id}")
        return deleted


__all__ = ['BrandService', 'DUPLICATE_NAME_MESSAGE']
