"""
Spreadsheet Import Service

Parses an uploaded workbook into hierarchy entries and swaps them in for the
current data set.

Workbook format:
- First sheet only (CSV accepted when the filename ends in .csv)
- Header row with B1, B2 and B3 columns (required)
- Optional detail column, by default 'B3的詳細資料'

Cell handling:
- Empty cells become ''
- Values are stringified and stripped
- Numeric labels read as floats (129.0) are written as integers ("129")
- Rows with any of B1, B2 or B3 blank are dropped; partial rows are logged

Replacing the data set deletes every entry and every percentage override,
inserts the new entries, and clears the aggregate cache. The three store
operations are not wrapped in one transaction: a failure in between can leave
entries without their previous overrides.
"""

import io
import logging
from typing import Any, List, Optional, Sequence

import pandas as pd

from renew_admin.core.cache import TTLCache
from renew_admin.core.errors import ValidationError
from renew_admin.models.schemas import Entry
from renew_admin.services.stores import EntryStore, OverrideStore


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

REQUIRED_COLUMNS: List[str] = ['B1', 'B2', 'B3']

DEFAULT_DETAIL_COLUMN: str = 'B3的詳細資料'

CSV_SUFFIXES = ('.csv',)


# =============================================================================
# PARSING
# =============================================================================

def format_cell(value: Any) -> str:
    """Render one spreadsheet cell as a stripped label string."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def validate_columns(df: pd.DataFrame) -> List[str]:
    """
    Return the required columns missing from ``df``.

    Column names are compared after stripping whitespace, case-insensitively.
    """
    present = {str(column).strip().upper() for column in df.columns}
    return [column for column in REQUIRED_COLUMNS if column not in present]


def _normalize_dataframe(df: pd.DataFrame, detail_column: str) -> pd.DataFrame:
    """Rename label columns to B1/B2/B3/detail and render every cell as text."""
    renames = {}
    for column in df.columns:
        name = str(column).strip()
        if name.upper() in REQUIRED_COLUMNS:
            renames[column] = name.upper()
        elif name == detail_column:
            renames[column] = 'detail'
    df_normalized = df.rename(columns=renames)

    if 'detail' not in df_normalized.columns:
        df_normalized['detail'] = ''

    df_normalized = df_normalized[REQUIRED_COLUMNS + ['detail']].copy()
    for column in df_normalized.columns:
        df_normalized[column] = df_normalized[column].map(format_cell)

    all_blank = (df_normalized[REQUIRED_COLUMNS] == '').all(axis=1)
    any_blank = (df_normalized[REQUIRED_COLUMNS] == '').any(axis=1)

    # Fully empty rows are skipped silently
    incomplete = any_blank & ~all_blank
    if incomplete.any():
        skipped = [int(i) + 2 for i in df_normalized.index[incomplete]]
        logger.warning(
            f"Skipping {len(skipped)} rows with a blank B1/B2/B3 label "
            f"(sheet rows {skipped[:10]})"
        )

    return df_normalized[~any_blank]


def _read_frame(content: bytes, filename: Optional[str]) -> pd.DataFrame:
    buffer = io.BytesIO(content)
    if filename and filename.lower().endswith(CSV_SUFFIXES):
        return pd.read_csv(buffer, dtype=object)
    return pd.read_excel(buffer, sheet_name=0, engine='openpyxl', dtype=object)


def parse_spreadsheet(
    content: bytes,
    filename: Optional[str] = None,
    detail_column: str = DEFAULT_DETAIL_COLUMN,
) -> List[Entry]:
    """
    Parse an uploaded workbook into entries.

    Args:
        content: Raw file bytes.
        filename: Original upload name; selects CSV parsing for .csv files.
        detail_column: Header of the free-text detail column.

    Returns:
        Entries in sheet order.

    Raises:
        ValidationError: If the file is empty, unreadable, or lacks a
            required column.
    """
    if not content:
        raise ValidationError("Uploaded file is empty", {'filename': filename})

    try:
        df = _read_frame(content, filename)
    except Exception as e:
        logger.warning(f"Failed to read uploaded file {filename!r}: {e}")
        raise ValidationError(
            f"Failed to read spreadsheet: {e}",
            {'filename': filename},
        ) from e

    logger.info(f"Parsed spreadsheet with {len(df)} rows and {len(df.columns)} columns")

    missing = validate_columns(df)
    if missing:
        raise ValidationError(
            f"Missing required columns: {', '.join(missing)}",
            {'missing': missing},
        )

    df = _normalize_dataframe(df, detail_column)

    return [
        Entry(B1=row.B1, B2=row.B2, B3=row.B3, detail=row.detail)
        for row in df.itertuples(index=False)
    ]


# =============================================================================
# DATA SET REPLACEMENT
# =============================================================================

class ImportService:
    """Bulk replacement and clearing of the entry set."""

    def __init__(self, entry_store: EntryStore, override_store: OverrideStore, cache: TTLCache):
        self.entry_store = entry_store
        self.override_store = override_store
        self.cache = cache

    async def replace_all_entries(self, entries: Sequence[Entry]) -> int:
        """
        Replace every entry with ``entries`` and drop all overrides.

        Returns:
            Number of entries stored.
        """
        previous = await self.entry_store.count()
        deleted_overrides = await self.override_store.delete_all()
        stored = await self.entry_store.replace_all(entries)
        self.cache.clear()

        logger.info(
            f"Import complete: {previous} entries replaced by {stored}, "
            f"{deleted_overrides} overrides removed"
        )
        return stored

    async def clear_all_data(self) -> None:
        """Delete every entry and every override, then clear the cache."""
        deleted_entries = await self.entry_store.delete_all()
        deleted_overrides = await self.override_store.delete_all()
        self.cache.clear()
        logger.info(f"Cleared {deleted_entries} entries and {deleted_overrides} overrides")


__all__ = [
    'REQUIRED_COLUMNS',
    'DEFAULT_DETAIL_COLUMN',
    'format_cell',
    'validate_columns',
    'parse_spreadsheet',
    'ImportService',
]
