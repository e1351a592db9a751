"""
Backend Services Module

Business logic for the Renew Admin API. Services receive their stores and the
shared cache through their constructors so tests can substitute fakes.

Services:
- stores: asyncpg-backed EntryStore and OverrideStore
- aggregation: B1 listing, B2/B3 distributions with overrides, override writes
- details: grouped free-text details with detail overrides
- ingestion: spreadsheet parsing and bulk replacement of the entry set
- brands: phone brand CRUD
- auth: password hashing, session tokens and the seed admin

All services are consumed by the API layer (renew_admin/api/).
"""

# =============================================================================
# Store Exports
# =============================================================================

from renew_admin.services.stores import (
    EntryStore,
    OverrideStore,
)

# =============================================================================
# Aggregation Exports
# B1 listing and B2/B3 distributions, cached and overlaid with overrides
# =============================================================================

from renew_admin.services.aggregation import (
    AggregationEngine,
    round_half_up,
    b1_sort_key,
)

# =============================================================================
# Detail Grouping Exports
# =============================================================================

from renew_admin.services.details import (
    DetailGroupingEngine,
)

# =============================================================================
# Import Exports
# =============================================================================

from renew_admin.services.ingestion import (
    ImportService,
    parse_spreadsheet,
    REQUIRED_COLUMNS,
)

# =============================================================================
# Phone Brand Exports
# =============================================================================

from renew_admin.services.brands import (
    BrandService,
)

# =============================================================================
# Auth Exports
# =============================================================================

from renew_admin.services.auth import (
    AuthService,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


__all__ = [
    # Stores
    'EntryStore',
    'OverrideStore',
    # Aggregation
    'AggregationEngine',
    'round_half_up',
    'b1_sort_key',
    # Details
    'DetailGroupingEngine',
    # Import
    'ImportService',
    'parse_spreadsheet',
    'REQUIRED_COLUMNS',
    # Brands
    'BrandService',
    # Auth
    'AuthService',
    'create_access_token',
    'decode_access_token',
    'hash_password',
    'verify_password',
]
