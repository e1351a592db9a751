'''
Renew Admin Backend Test Suite

Test Modules:
-------------
- test_cache.py: TTL cache expiry and path invalidation
- test_aggregation.py: B1 listing, B2/B3 distributions, overrides
  - Half-up rounding
  - Override precedence and sorting
  - Invalidation limited to the written path
- test_details.py: Detail grouping and configured detail percentages
- test_stores.py: asyncpg stores and their SQL against a mock pool
- test_ingestion.py: Workbook parsing and bulk replacement
- test_brands.py: Phone brand CRUD
- test_auth.py: Passwords, session tokens, admin seeding
- test_api.py: HTTP contract via TestClient (marked integration)

Running Tests:
--------------
    pip install -e ".[test]"
    pytest renew_admin/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
