"""
DDL for the Renew Admin tables.

Executed by renew_admin.core.database.ensure_schema() at startup. Every
statement is idempotent (IF NOT EXISTS) so repeated startups are safe.

Tables:
    data_entry            imported B1/B2/B3/detail rows
    percentage_override   operator-configured percentages
    phone_brand           named entities with a percentage
    app_user              accounts for token authentication

Override key columns are NOT NULL with '' for unused components: PostgreSQL
treats NULLs as distinct in unique constraints, which would allow duplicate
B2 overrides.
"""

from typing import List


DATA_ENTRY_DDL = """
CREATE TABLE IF NOT EXISTS data_entry (
    id          BIGSERIAL PRIMARY KEY,
    b1          TEXT NOT NULL,
    b2          TEXT NOT NULL,
    b3          TEXT NOT NULL,
    detail      TEXT NOT NULL DEFAULT '',
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

PERCENTAGE_OVERRIDE_DDL = """
CREATE TABLE IF NOT EXISTS percentage_override (
    id          BIGSERIAL PRIMARY KEY,
    scope_type  TEXT NOT NULL CHECK (scope_type IN ('B2', 'B3', 'B3_DETAIL')),
    b1          TEXT NOT NULL,
    b2          TEXT NOT NULL DEFAULT '',
    b3          TEXT NOT NULL DEFAULT '',
    value       TEXT NOT NULL,
    percentage  DOUBLE PRECISION NOT NULL DEFAULT 0
                CHECK (percentage >= 0 AND percentage <= 100),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT uq_percentage_override_key UNIQUE (scope_type, b1, b2, b3, value)
)
"""

PHONE_BRAND_DDL = """
CREATE TABLE IF NOT EXISTS phone_brand (
    id          BIGSERIAL PRIMARY KEY,
    name        TEXT NOT NULL,
    percentage  DOUBLE PRECISION NOT NULL DEFAULT 0
                CHECK (percentage >= 0 AND percentage <= 100),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT uq_phone_brand_name UNIQUE (name)
)
"""

APP_USER_DDL = """
CREATE TABLE IF NOT EXISTS app_user (
    id             BIGSERIAL PRIMARY KEY,
    username       TEXT NOT NULL,
    password_hash  TEXT NOT NULL,
    role           TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('admin', 'user')),
    created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT uq_app_user_username UNIQUE (username)
)
"""

# Lookups by B1, B1/B2 and the full triple
INDEX_DDL: List[str] = [
    "CREATE INDEX IF NOT EXISTS ix_data_entry_b1 ON data_entry (b1)",
    "CREATE INDEX IF NOT EXISTS ix_data_entry_b1_b2 ON data_entry (b1, b2)",
    "CREATE INDEX IF NOT EXISTS ix_data_entry_b1_b2_b3 ON data_entry (b1, b2, b3)",
    "CREATE INDEX IF NOT EXISTS ix_percentage_override_scope_b1 "
    "ON percentage_override (scope_type, b1)",
    "CREATE INDEX IF NOT EXISTS ix_percentage_override_scope_b1_b2 "
    "ON percentage_override (scope_type, b1, b2)",
]


def get_schema_statements() -> List[str]:
    """Return all DDL statements in dependency-safe execution order."""
    return [
        DATA_ENTRY_DDL,
        PERCENTAGE_OVERRIDE_DDL,
        PHONE_BRAND_DDL,
        APP_USER_DDL,
        *INDEX_DDL,
    ]
