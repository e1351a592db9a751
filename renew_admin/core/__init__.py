"""
Core infrastructure package for the Renew Admin backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- The TTL cache shared by the aggregation engine and brand service
- The service-layer error types

FastAPI dependencies live in renew_admin.core.dependencies and are imported
from there directly; they depend on the services package, which itself
imports from this package.

Usage:
    from renew_admin.core import get_settings, init_db, close_db, TTLCache
"""

from renew_admin.core.config import Settings, get_settings
from renew_admin.core.database import (
    init_db,
    close_db,
    get_db_pool,
    ensure_schema,
)
from renew_admin.core.cache import TTLCache
from renew_admin.core.errors import (
    RenewAdminError,
    ValidationError,
    StoreError,
    DuplicateNameError,
    AuthenticationError,
)


__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Database
    "init_db",
    "close_db",
    "get_db_pool",
    "ensure_schema",
    # Cache
    "TTLCache",
    # Errors
    "RenewAdminError",
    "ValidationError",
    "StoreError",
    "DuplicateNameError",
    "AuthenticationError",
]
