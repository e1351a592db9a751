"""
Package initialization file for Renew Admin models.

Re-exports the enumerations, path filters and Pydantic schemas so other
modules can import them from ``renew_admin.models`` directly.

Usage:
    from renew_admin.models import (
        Level,
        ScopeType,
        B2Filter,
        AggregateRow,
        DetailRow,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from renew_admin.models.enums import (
    Level,
    ScopeType,
    UserRole,
)

# =============================================================================
# Path Filters
# =============================================================================

from renew_admin.models.paths import (
    B1Filter,
    B2Filter,
    B3Filter,
    DetailFilter,
    PathFilter,
    filter_for_children,
)

# =============================================================================
# Schemas
# =============================================================================

from renew_admin.models.schemas import (
    Percentage,
    Entry,
    Override,
    AggregateRow,
    DetailRow,
    B2PercentageUpdate,
    B3PercentageUpdate,
    DetailPercentageUpdate,
    PhoneBrand,
    PhoneBrandCreate,
    PhoneBrandUpdate,
    User,
    UserInfo,
    LoginRequest,
    LoginResponse,
    TokenValidationResponse,
    MessageResponse,
    CreateAdminResponse,
    ImportResponse,
    HealthResponse,
)


__all__ = [
    # Enums
    'Level',
    'ScopeType',
    'UserRole',
    # Path filters
    'B1Filter',
    'B2Filter',
    'B3Filter',
    'DetailFilter',
    'PathFilter',
    'filter_for_children',
    # Schemas
    'Percentage',
    'Entry',
    'Override',
    'AggregateRow',
    'DetailRow',
    'B2PercentageUpdate',
    'B3PercentageUpdate',
    'DetailPercentageUpdate',
    'PhoneBrand',
    'PhoneBrandCreate',
    'PhoneBrandUpdate',
    'User',
    'UserInfo',
    'LoginRequest',
    'LoginResponse',
    'TokenValidationResponse',
    'MessageResponse',
    'CreateAdminResponse',
    'ImportResponse',
    'HealthResponse',
]
