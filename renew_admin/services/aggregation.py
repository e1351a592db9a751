"""
Aggregation-with-override engine for the B1 → B2 → B3 hierarchy.

For a parent path the engine groups the entries below it by the child label,
computes each child's natural share of the total, overlays any percentage an
operator configured for the same (path, value), sorts, and caches the rows.

Flow for get_child_distribution(Level.B2, b1):
    1. cache lookup under ``b2Data:<b1>``
    2. EntryStore.group_count(B2Filter(b1), 'b2')
    3. OverrideStore.find(ScopeType.B2, B2Filter(b1))
    4. percentage = override if present else round_half_up(count / total * 100)
    5. stable sort by percentage descending
    6. cache for the aggregate TTL

Override writes go through set_override(), which upserts the override and then
invalidates only the cache entries under the written path.

Rounding:
    Natural percentages use ROUND_HALF_UP on a Decimal built from the exact
    count ratio. Python's round() is banker's rounding (round(2.5) == 2) and
    would disagree with the displayed numbers for exact halves.
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from renew_admin.core.cache import (
    B1_VALUES_CATEGORY,
    B2_DATA_CATEGORY,
    B3_DATA_CATEGORY,
    TTLCache,
)
from renew_admin.core.errors import ValidationError
from renew_admin.models.enums import Level, ScopeType
from renew_admin.models.paths import filter_for_children
from renew_admin.models.schemas import AggregateRow, Percentage
from renew_admin.services.stores import EntryStore, OverrideStore


logger = logging.getLogger(__name__)


# Cache namespace and grouped column for each distribution level
LEVEL_CATEGORY: Dict[Level, str] = {
    Level.B2: B2_DATA_CATEGORY,
    Level.B3: B3_DATA_CATEGORY,
}

LEVEL_FIELD: Dict[Level, str] = {
    Level.B2: 'b2',
    Level.B3: 'b3',
}

LEVEL_PATH_LENGTH: Dict[Level, int] = {
    Level.B2: 1,
    Level.B3: 2,
}

_LEADING_INT = re.compile(r'^\s*(\d+)')


# =============================================================================
# Helpers
# =============================================================================

def round_half_up(numerator: int, denominator: int, places: int = 0) -> Percentage:
    """
    Return ``numerator / denominator * 100`` rounded half away from zero.

    Args:
        numerator: Group count.
        denominator: Total count; must be positive.
        places: Decimal places to keep. 0 returns an int.
    """
    ratio = Decimal(numerator) * 100 / Decimal(denominator)
    quantum = Decimal(1).scaleb(-places)
    rounded = ratio.quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def b1_sort_key(value: str) -> Tuple[Any, ...]:
    """
    Numeric-then-lexical ordering for B1 labels.

    Labels starting with digits sort first by that number ("2 Foo" before
    "10 Bar"), then by the full string; all other labels follow in plain
    string order.
    """
    match = _LEADING_INT.match(value)
    if match:
        return (0, int(match.group(1)), value)
    return (1, value)


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def check_percentage(percentage: Any) -> Percentage:
    """
    Accept ints and floats, reject everything else (including bools).

    The 0-100 range is enforced by the override store, not here.
    """
    if isinstance(percentage, bool) or not isinstance(percentage, (int, float)):
        raise ValidationError(
            "Percentage must be a number",
            {'percentage': percentage},
        )
    return percentage


def check_path(path_keys: Sequence[Optional[str]], value: Optional[str]) -> Tuple[str, ...]:
    """Reject missing or blank path components and values."""
    if any(is_blank(key) for key in path_keys) or is_blank(value):
        raise ValidationError(
            "Path components and value are required",
            {'path': list(path_keys), 'value': value},
        )
    return tuple(path_keys)


# =============================================================================
# Engine
# =============================================================================

class AggregationEngine:
    """
    Serves B1 listings and B2/B3 distributions, and writes B2/B3 overrides.

    Args:
        entry_store: Source of raw entries and grouped counts.
        override_store: Source and sink of configured percentages.
        cache: Shared TTLCache from the application state.
        default_ttl: TTL in seconds for the B1 listing.
        aggregate_ttl: TTL in seconds for B2/B3 rows.
    """

    def __init__(
        self,
        entry_store: EntryStore,
        override_store: OverrideStore,
        cache: TTLCache,
        default_ttl: float = 300.0,
        aggregate_ttl: float = 120.0,
    ):
        self.entry_store = entry_store
        self.override_store = override_store
        self.cache = cache
        self.default_ttl = default_ttl
        self.aggregate_ttl = aggregate_ttl

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_top_level_values(self) -> List[str]:
        """All distinct B1 values, numeric-then-lexical ascending."""
        key = TTLCache.make_key(B1_VALUES_CATEGORY)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        values = await self.entry_store.distinct_values('b1')
        values = sorted(values, key=b1_sort_key)
        if values:
            self.cache.set(key, values, ttl=self.default_ttl)
        return list(values)

    async def get_child_distribution(self, level: Level, *parent_path: Optional[str]) -> List[AggregateRow]:
        """
        Distribution of ``level`` values under ``parent_path``.

        ``parent_path`` is ``(b1,)`` for Level.B2 and ``(b1, b2)`` for
        Level.B3. A missing or blank component yields an empty list, as does
        a path with no entries.

        Raises:
            ValueError: If ``level`` is not B2 or B3.
            StoreError: If a store read fails.
        """
        if level not in LEVEL_CATEGORY:
            raise ValueError(f"No distribution for level {level.value}")
        if len(parent_path) != LEVEL_PATH_LENGTH[level] or any(is_blank(p) for p in parent_path):
            return []

        key = TTLCache.make_key(LEVEL_CATEGORY[level], *parent_path)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        path_filter = filter_for_children(level, tuple(parent_path))
        groups = await self.entry_store.group_count(path_filter, LEVEL_FIELD[level])
        if not groups:
            return []

        total_count = sum(group['count'] for group in groups)
        overrides = await self.override_store.find(ScopeType.for_level(level), path_filter)
        configured = {override.value: override.percentage for override in overrides}

        rows = []
        for group in groups:
            value = group['value']
            count = group['count']
            if value in configured:
                percentage = configured[value]
            else:
                percentage = round_half_up(count, total_count)
            rows.append(AggregateRow(
                value=value,
                count=count,
                totalCount=total_count,
                percentage=percentage,
            ))

        # sorted() is stable: equal percentages keep grouping order
        rows = sorted(rows, key=lambda row: row.percentage, reverse=True)

        logger.debug(
            f"Computed {len(rows)} {level.value} rows for {parent_path} "
            f"({len(configured)} configured)"
        )
        self.cache.set(key, rows, ttl=self.aggregate_ttl)
        return list(rows)

    async def list_child_distribution(self, level: Level, *parent_path: Optional[str]) -> List[AggregateRow]:
        return await self.get_child_distribution(level, *parent_path)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def set_override(
        self,
        scope_type: ScopeType,
        path_keys: Sequence[Optional[str]],
        value: Optional[str],
        percentage: Any,
    ) -> None:
        """
        Upsert a B2 or B3 override and invalidate the cached rows for its path.

        Raises:
            ValidationError: If the percentage is not numeric or a path
                component/value is blank.
            StoreError: If the store rejects the write (e.g. out of range).
        """
        percentage = check_percentage(percentage)
        if scope_type == ScopeType.B2:
            category, expected = B2_DATA_CATEGORY, 1
        elif scope_type == ScopeType.B3:
            category, expected = B3_DATA_CATEGORY, 2
        else:
            raise ValueError(f"Use DetailGroupingEngine for {scope_type.value} overrides")

        if len(path_keys) != expected:
            raise ValidationError(
                f"{scope_type.value} overrides need {expected} path component(s)",
                {'path': list(path_keys)},
            )
        keys = check_path(path_keys, value)

        await self.override_store.upsert(scope_type, keys, value, percentage)

        removed = self.cache.invalidate_path(category, *keys)
        logger.info(
            f"Set {scope_type.value} percentage {keys}/{value} = {percentage} "
            f"({removed} cache entries invalidated)"
        )

    async def set_child_override(
        self,
        level: Level,
        *parent_path: Optional[str],
        value: Optional[str],
        percentage: Any,
    ) -> None:
        """Level-addressed form of set_override (B2 or B3)."""
        await self.set_override(ScopeType.for_level(level), parent_path, value, percentage)

    async def clear_all_overrides(self) -> int:
        """
        Delete every override of every scope and drop cached B2/B3 rows.

        Returns:
            Number of overrides deleted.
        """
        deleted = await self.override_store.delete_all()
        self.cache.invalidate_path(B2_DATA_CATEGORY)
        self.cache.invalidate_path(B3_DATA_CATEGORY)
        logger.info(f"Cleared {deleted} percentage overrides")
        return deleted


__all__ = [
    'AggregationEngine',
    'round_half_up',
    'b1_sort_key',
    'check_percentage',
    'check_path',
    'is_blank',
]
