"""
FastAPI dependency injection module for the Renew Admin backend.

Routers receive their collaborators through these dependencies, so tests can
replace any of them with ``app.dependency_overrides``.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: the cached Settings singleton
- get_cache / CacheDep: the TTLCache created in the lifespan (app.state.cache)
- get_aggregation_engine, get_detail_engine, get_import_service,
  get_brand_service, get_auth_service: service instances wired to the stores
  and the shared cache
- get_current_user / CurrentUserDep: bearer-token authentication
- require_admin / AdminUserDep: admin role check

Usage Examples:
    @router.put("/b2/percentage")
    async def update_b2_percentage(
        body: B2PercentageUpdate,
        engine: AggregationEngineDep,
        admin: AdminUserDep,
    ):
        await engine.set_override(ScopeType.B2, (body.b1,), body.value, body.percentage)

    # In tests
    app.dependency_overrides[get_aggregation_engine] = lambda: fake_engine
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from renew_admin.core.cache import TTLCache
from renew_admin.core.config import Settings, get_settings
from renew_admin.core.errors import AuthenticationError, StoreError
from renew_admin.models.enums import UserRole
from renew_admin.models.schemas import User
from renew_admin.services.aggregation import AggregationEngine
from renew_admin.services.auth import AuthService
from renew_admin.services.brands import BrandService
from renew_admin.services.details import DetailGroupingEngine
from renew_admin.services.ingestion import ImportService
from renew_admin.services.stores import EntryStore, OverrideStore


logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_user, not by HTTPBearer
security = HTTPBearer(auto_error=False)


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Cache Dependency
# =============================================================================

def get_cache(request: Request) -> TTLCache:
    """Return the TTLCache that the lifespan stored on ``app.state``."""
    return request.app.state.cache


CacheDep = Annotated[TTLCache, Depends(get_cache)]


# =============================================================================
# Service Dependencies
# =============================================================================

def get_entry_store() -> EntryStore:
    return EntryStore()


def get_override_store() -> OverrideStore:
    return OverrideStore()


EntryStoreDep = Annotated[EntryStore, Depends(get_entry_store)]
OverrideStoreDep = Annotated[OverrideStore, Depends(get_override_store)]


def get_aggregation_engine(
    cache: CacheDep,
    settings: SettingsDep,
    entry_store: EntryStoreDep,
    override_store: OverrideStoreDep,
) -> AggregationEngine:
    return AggregationEngine(
        entry_store,
        override_store,
        cache,
        default_ttl=settings.default_cache_ttl_seconds,
        aggregate_ttl=settings.aggregate_cache_ttl_seconds,
    )


def get_detail_engine(
    entry_store: EntryStoreDep,
    override_store: OverrideStoreDep,
) -> DetailGroupingEngine:
    return DetailGroupingEngine(entry_store, override_store)


def get_import_service(
    cache: CacheDep,
    entry_store: EntryStoreDep,
    override_store: OverrideStoreDep,
) -> ImportService:
    return ImportService(entry_store, override_store, cache)


def get_brand_service(cache: CacheDep, settings: SettingsDep) -> BrandService:
    return BrandService(cache, ttl=settings.default_cache_ttl_seconds)


def get_auth_service(settings: SettingsDep) -> AuthService:
    return AuthService(settings)


AggregationEngineDep = Annotated[AggregationEngine, Depends(get_aggregation_engine)]
DetailEngineDep = Annotated[DetailGroupingEngine, Depends(get_detail_engine)]
ImportServiceDep = Annotated[ImportService, Depends(get_import_service)]
BrandServiceDep = Annotated[BrandService, Depends(get_brand_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


# =============================================================================
# Authentication Dependencies
# =============================================================================

async def get_current_user(
    auth_service: AuthServiceDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Resolve the bearer token to an account.

    Raises:
        HTTPException 401: No bearer token was sent.
        HTTPException 403: The token is invalid or expired, or its user is gone.
        HTTPException 500: The user lookup failed.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
        )

    try:
        return await auth_service.user_for_token(credentials.credentials)
    except AuthenticationError as e:
        logger.warning(f"Token rejected: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )


CurrentUserDep = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUserDep) -> User:
    if user.role != UserRole.ADMIN:
        logger.warning(f"Non-admin user {user.username!r} attempted an admin action")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


AdminUserDep = Annotated[User, Depends(require_admin)]


__all__ = [
    "get_settings_dependency",
    "get_cache",
    "get_entry_store",
    "get_override_store",
    "get_aggregation_engine",
    "get_detail_engine",
    "get_import_service",
    "get_brand_service",
    "get_auth_service",
    "get_current_user",
    "require_admin",
    "SettingsDep",
    "CacheDep",
    "AggregationEngineDep",
    "DetailEngineDep",
    "ImportServiceDep",
    "BrandServiceDep",
    "AuthServiceDep",
    "CurrentUserDep",
    "AdminUserDep",
]
