"""
SQL Query Module for the Renew Admin backend.

Provides DDL and parameterized SQL (asyncpg ``$n`` placeholders) for:
- Table and index creation (schema)
- Imported hierarchy entries (entry_queries)
- Percentage overrides (override_queries)
- Phone brands (brand_queries)
- Accounts (user_queries)

Path-scoped queries are built from a PathFilter so that the WHERE clause and
the positional arguments always agree.

Example usage:
    from renew_admin.sql import get_group_count_query
    from renew_admin.models import B3Filter

    path = B3Filter('129 Zhongshan', 'Phones')
    rows = await conn.fetch(get_group_count_query(path, 'b3'), *path.keys)
"""

from renew_admin.sql.schema import (
    get_schema_statements,
)

from renew_admin.sql.entry_queries import (
    ENTRY_FIELDS,
    get_find_by_path_query,
    get_group_count_query,
    get_distinct_values_query,
    INSERT_ENTRY,
    DELETE_ALL_ENTRIES,
    COUNT_ENTRIES,
)

from renew_admin.sql.override_queries import (
    get_find_overrides_query,
    UPSERT_OVERRIDE,
    DELETE_ALL_OVERRIDES,
    DELETE_OVERRIDES_BY_SCOPE,
)

from renew_admin.sql.brand_queries import (
    LIST_BRANDS,
    INSERT_BRAND,
    UPDATE_BRAND,
    DELETE_BRAND,
)

from renew_admin.sql.user_queries import (
    GET_USER_BY_ID,
    GET_USER_BY_USERNAME,
    INSERT_USER,
    DELETE_USER_BY_USERNAME,
)


__all__ = [
    # Schema
    "get_schema_statements",
    # Entries
    "ENTRY_FIELDS",
    "get_find_by_path_query",
    "get_group_count_query",
    "get_distinct_values_query",
    "INSERT_ENTRY",
    "DELETE_ALL_ENTRIES",
    "COUNT_ENTRIES",
    # Overrides
    "get_find_overrides_query",
    "UPSERT_OVERRIDE",
    "DELETE_ALL_OVERRIDES",
    "DELETE_OVERRIDES_BY_SCOPE",
    # Brands
    "LIST_BRANDS",
    "INSERT_BRAND",
    "UPDATE_BRAND",
    "DELETE_BRAND",
    # Users
    "GET_USER_BY_ID",
    "GET_USER_BY_USERNAME",
    "INSERT_USER",
    "DELETE_USER_BY_USERNAME",
]
