"""
Parameterized SQL for the percentage_override table.

Overrides are keyed by (scope_type, b1, b2, b3, value) with '' in unused
path columns. The find query filters by scope type ($1) followed by the
PathFilter columns ($2...).
"""

from renew_admin.models.paths import PathFilter


def get_find_overrides_query(path_filter: PathFilter) -> str:
    conditions = ["scope_type = $1"] + [
        f"{column} = ${position}"
        for position, column in enumerate(path_filter.columns, start=2)
    ]
    return f"""
    SELECT id, scope_type, b1, b2, b3, value, percentage
    FROM percentage_override
    WHERE {" AND ".join(conditions)}
    ORDER BY id
    """


UPSERT_OVERRIDE = """
INSERT INTO percentage_override (scope_type, b1, b2, b3, value, percentage)
VALUES ($1, $2, $3, $4, $5, $6)
ON CONFLICT (scope_type, b1, b2, b3, value)
DO UPDATE SET
    percentage = EXCLUDED.percentage,
    updated_at = NOW()
RETURNING id, scope_type, b1, b2, b3, value, percentage
"""

DELETE_ALL_OVERRIDES = "DELETE FROM percentage_override"

DELETE_OVERRIDES_BY_SCOPE = "DELETE FROM percentage_override WHERE scope_type = $1"
