"""
Parameterized SQL for the data_entry table.

Path-scoped queries are generated from a PathFilter: the filter's ``columns``
become ``col = $n`` conditions in order and its ``keys`` are passed as the
positional arguments, so callers execute:

    sql = get_group_count_query(B2Filter('X'), 'b2')
    rows = await conn.fetch(sql, *B2Filter('X').keys)

Column names are never taken from user input; ``group_field`` is checked
against ENTRY_FIELDS.
"""

from typing import Tuple

from renew_admin.models.paths import PathFilter


ENTRY_FIELDS: Tuple[str, ...] = ('b1', 'b2', 'b3', 'detail')


def _where_clause(path_filter: PathFilter) -> str:
    conditions = [
        f"{column} = ${position}"
        for position, column in enumerate(path_filter.columns, start=1)
    ]
    if not conditions:
        return ""
    return "WHERE " + " AND ".join(conditions)


def _check_field(field: str) -> str:
    if field not in ENTRY_FIELDS:
        raise ValueError(f"Unknown entry field: {field}")
    return field


def get_find_by_path_query(path_filter: PathFilter) -> str:
    """Entries under ``path_filter`` in insertion order."""
    return f"""
    SELECT id, b1, b2, b3, detail
    FROM data_entry
    {_where_clause(path_filter)}
    ORDER BY id
    """


def get_group_count_query(path_filter: PathFilter, group_field: str) -> str:
    """
    Count entries under ``path_filter`` grouped by ``group_field``.

    Groups come back in first-encountered order (lowest entry id per group),
    which is the order a sequential scan of the entries would see them.
    """
    field = _check_field(group_field)
    return f"""
    SELECT {field} AS value, COUNT(*) AS count
    FROM data_entry
    {_where_clause(path_filter)}
    GROUP BY {field}
    ORDER BY MIN(id)
    """


def get_distinct_values_query(field: str) -> str:
    field = _check_field(field)
    return f"SELECT DISTINCT {field} AS value FROM data_entry"


INSERT_ENTRY = """
INSERT INTO data_entry (b1, b2, b3, detail)
VALUES ($1, $2, $3, $4)
"""

DELETE_ALL_ENTRIES = "DELETE FROM data_entry"

COUNT_ENTRIES = "SELECT COUNT(*) FROM data_entry"
