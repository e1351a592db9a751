"""
Grouping of free-text details under one B1/B2/B3 path.

Details are trimmed, blanks are dropped, and identical strings are counted
together (case-sensitive). Each group's percentage is its share of all
non-blank details at two decimals. A B3_DETAIL override is reported next to
the natural percentage as ``configuredPercentage`` and never replaces it.

Results are computed on every call; nothing here reads or writes the cache.
"""

import logging
from typing import Any, Dict, List, Optional

from renew_admin.models.enums import ScopeType
from renew_admin.models.paths import DetailFilter
from renew_admin.models.schemas import DetailRow
from renew_admin.services.aggregation import (
    check_path,
    check_percentage,
    is_blank,
    round_half_up,
)
from renew_admin.services.stores import EntryStore, OverrideStore


logger = logging.getLogger(__name__)


class DetailGroupingEngine:
    """
    Groups the details of one B1/B2/B3 path and records detail overrides.

    Args:
        entry_store: Source of the entries under a path.
        override_store: Holds the B3_DETAIL overrides attached to each group.
    """

    def __init__(self, entry_store: EntryStore, override_store: OverrideStore):
        self.entry_store = entry_store
        self.override_store = override_store

    async def get_raw_details(
        self,
        b1: Optional[str],
        b2: Optional[str],
        b3: Optional[str],
    ) -> List[str]:
        """Non-empty details of the exact (b1, b2, b3) path in entry order, untrimmed."""
        if is_blank(b1) or is_blank(b2) or is_blank(b3):
            return []
        entries = await self.entry_store.find_by_path(DetailFilter(b1, b2, b3))
        return [entry.detail for entry in entries if entry.detail]

    async def get_grouped_details(
        self,
        b1: Optional[str],
        b2: Optional[str],
        b3: Optional[str],
    ) -> List[DetailRow]:
        """
        Grouped detail rows for the exact (b1, b2, b3) path.

        Rows are sorted by count descending; equal counts keep the order in
        which their detail first appeared.
        """
        if is_blank(b1) or is_blank(b2) or is_blank(b3):
            return []

        path_filter = DetailFilter(b1, b2, b3)
        entries = await self.entry_store.find_by_path(path_filter)

        # dicts preserve insertion order, which gives first-encountered grouping
        counts: Dict[str, int] = {}
        for entry in entries:
            detail = (entry.detail or '').strip()
            if detail:
                counts[detail] = counts.get(detail, 0) + 1

        total_count = sum(counts.values())
        if total_count == 0:
            return []

        overrides = await self.override_store.find(ScopeType.B3_DETAIL, path_filter)
        configured = {override.value: override.percentage for override in overrides}

        rows = [
            DetailRow(
                detail=detail,
                count=count,
                totalCount=total_count,
                percentage=round_half_up(count, total_count, places=2),
                configuredPercentage=configured.get(detail),
            )
            for detail, count in counts.items()
        ]
        return sorted(rows, key=lambda row: row.count, reverse=True)

    async def list_grouped_details(self, b1, b2, b3) -> List[DetailRow]:
        return await self.get_grouped_details(b1, b2, b3)

    async def set_detail_override(
        self,
        b1: Optional[str],
        b2: Optional[str],
        b3: Optional[str],
        detail: Optional[str],
        percentage: Any,
    ) -> None:
        """
        Upsert the B3_DETAIL override for the trimmed ``detail``.

        Raises:
            ValidationError: Missing path component/detail or non-numeric
                percentage.
            StoreError: The store rejected the write.
        """
        percentage = check_percentage(percentage)
        keys = check_path((b1, b2, b3), detail)
        trimmed = detail.strip()

        await self.override_store.upsert(ScopeType.B3_DETAIL, keys, trimmed, percentage)
        logger.info(f"Set detail percentage {keys}/{trimmed} = {percentage}")


__all__ = ['DetailGroupingEngine']
