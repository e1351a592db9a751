"""
PostgreSQL-backed stores for hierarchy entries and percentage overrides.

The aggregation and detail engines depend only on the methods defined here,
so tests substitute in-memory fakes with the same surface.

EntryStore:
    find_by_path(path_filter)            entries under a path, by id
    group_count(path_filter, field)      [{value, count}] in first-seen order
    distinct_values(field)               distinct values of one column
    replace_all(entries)                 swap the whole entry set
    delete_all()                         remove every entry
    count()                              number of stored entries

OverrideStore:
    find(scope_type, path_filter)        overrides of one scope under a path
    upsert(scope_type, path_keys, value, percentage)
    delete_all(scope_type=None)          remove all, or one scope's overrides

Every asyncpg failure is re-raised as StoreError so callers see a single
error type regardless of driver details.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

import asyncpg

from renew_admin.core.database import get_db_pool, rows_affected
from renew_admin.core.errors import StoreError
from renew_admin.models.enums import ScopeType
from renew_admin.models.paths import PathFilter
from renew_admin.models.schemas import Entry, Override, Percentage
from renew_admin.sql.entry_queries import (
    COUNT_ENTRIES,
    DELETE_ALL_ENTRIES,
    INSERT_ENTRY,
    get_distinct_values_query,
    get_find_by_path_query,
    get_group_count_query,
)
from renew_admin.sql.override_queries import (
    DELETE_ALL_OVERRIDES,
    DELETE_OVERRIDES_BY_SCOPE,
    UPSERT_OVERRIDE,
    get_find_overrides_query,
)


logger = logging.getLogger(__name__)

# Override keys are always stored as (b1, b2, b3); unused components are ''
OVERRIDE_KEY_LENGTH = 3

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def normalize_percentage(value: Union[int, float]) -> Percentage:
    """Return integral floats as int so 77.0 read from the database stays 77."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def describe_store_error(error: Exception) -> str:
    """Human-readable message for an asyncpg failure."""
    if isinstance(error, asyncpg.CheckViolationError):
        return "Percentage must be between 0 and 100"
    if isinstance(error, asyncpg.UniqueViolationError):
        return "Duplicate key"
    return f"Database operation failed: {error}"


def _record_to_entry(row) -> Entry:
    return Entry(
        id=row['id'],
        B1=row['b1'],
        B2=row['b2'],
        B3=row['b3'],
        detail=row['detail'] or '',
    )


def _record_to_override(row) -> Override:
    return Override(
        id=row['id'],
        scope_type=ScopeType(row['scope_type']),
        B1=row['b1'],
        B2=row['b2'],
        B3=row['b3'],
        value=row['value'],
        percentage=normalize_percentage(row['percentage']),
    )


class EntryStore:
    """Imported B1/B2/B3/detail rows in the data_entry table."""

    async def find_by_path(self, path_filter: PathFilter) -> List[Entry]:
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(get_find_by_path_query(path_filter), *path_filter.keys)
        except DB_ERRORS as e:
            logger.error(f"Failed to load entries for {path_filter}: {e}")
            raise StoreError(describe_store_error(e), {'path': path_filter.keys}) from e
        return [_record_to_entry(row) for row in rows]

    async def group_count(self, path_filter: PathFilter, group_field: str) -> List[Dict[str, object]]:
        """
        Count entries under ``path_filter`` grouped by ``group_field``.

        Returns:
            List of ``{'value': str, 'count': int}`` in first-encountered order.
        """
        query = get_group_count_query(path_filter, group_field)
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, *path_filter.keys)
        except DB_ERRORS as e:
            logger.error(f"Failed to group entries by {group_field} for {path_filter}: {e}")
            raise StoreError(describe_store_error(e), {'path': path_filter.keys}) from e
        return [{'value': row['value'], 'count': int(row['count'])} for row in rows]

    async def distinct_values(self, field: str) -> List[str]:
        query = get_distinct_values_query(field)
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(query)
        except DB_ERRORS as e:
            logger.error(f"Failed to list distinct {field} values: {e}")
            raise StoreError(describe_store_error(e)) from e
        return [row['value'] for row in rows]

    async def replace_all(self, entries: Sequence[Entry]) -> int:
        """
        Delete every entry and insert ``entries`` in one transaction.

        Returns:
            Number of entries inserted.
        """
        records = [(e.B1, e.B2, e.B3, e.detail) for e in entries]
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(DELETE_ALL_ENTRIES)
                    if records:
                        await conn.executemany(INSERT_ENTRY, records)
        except DB_ERRORS as e:
            logger.error(f"Failed to replace entries: {e}")
            raise StoreError(describe_store_error(e)) from e
        logger.info(f"Stored {len(records)} entries")
        return len(records)

    async def delete_all(self) -> int:
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                status = await conn.execute(DELETE_ALL_ENTRIES)
        except DB_ERRORS as e:
            logger.error(f"Failed to delete entries: {e}")
            raise StoreError(describe_store_error(e)) from e
        deleted = rows_affected(status)
        logger.info(f"Deleted {deleted} entries")
        return deleted

    async def count(self) -> int:
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                value = await conn.fetchval(COUNT_ENTRIES)
        except DB_ERRORS as e:
            raise StoreError(describe_store_error(e)) from e
        return int(value or 0)


class OverrideStore:
    """Operator-configured percentages in the percentage_override table."""

    async def find(self, scope_type: ScopeType, path_filter: PathFilter) -> List[Override]:
        query = get_find_overrides_query(path_filter)
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, scope_type.value, *path_filter.keys)
        except DB_ERRORS as e:
            logger.error(f"Failed to load {scope_type.value} overrides for {path_filter}: {e}")
            raise StoreError(describe_store_error(e), {'scope_type': scope_type.value}) from e
        return [_record_to_override(row) for row in rows]

    async def upsert(
        self,
        scope_type: ScopeType,
        path_keys: Sequence[str],
        value: str,
        percentage: Percentage,
    ) -> Override:
        """
        Insert or update the override keyed by (scope_type, path_keys, value).

        Raises:
            StoreError: If the write fails, including a percentage outside
                [0, 100] rejected by the table's CHECK constraint.
        """
        if len(path_keys) > OVERRIDE_KEY_LENGTH:
            raise ValueError(f"Override path has at most {OVERRIDE_KEY_LENGTH} components")
        keys = list(path_keys) + [''] * (OVERRIDE_KEY_LENGTH - len(path_keys))
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    UPSERT_OVERRIDE,
                    scope_type.value,
                    keys[0],
                    keys[1],
                    keys[2],
                    value,
                    float(percentage),
                )
        except DB_ERRORS as e:
            logger.error(
                f"Failed to save {scope_type.value} override {keys}/{value}={percentage}: {e}"
            )
            raise StoreError(
                describe_store_error(e),
                {'scope_type': scope_type.value, 'value': value, 'percentage': percentage},
            ) from e
        logger.info(f"Saved {scope_type.value} override {keys}/{value} = {percentage}")
        return _record_to_override(row)

    async def delete_all(self, scope_type: Optional[ScopeType] = None) -> int:
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                if scope_type is None:
                    status = await conn.execute(DELETE_ALL_OVERRIDES)
                else:
                    status = await conn.execute(DELETE_OVERRIDES_BY_SCOPE, scope_type.value)
        except DB_ERRORS as e:
            logger.error(f"Failed to delete overrides: {e}")
            raise StoreError(describe_store_error(e)) from e
        deleted = rows_affected(status)
        logger.info(
            f"Deleted {deleted} overrides"
            + (f" of scope {scope_type.value}" if scope_type else "")
        )
        return deleted


__all__ = [
    'EntryStore',
    'OverrideStore',
    'normalize_percentage',
    'describe_store_error',
]
