"""
Renew Admin Backend Package.

FastAPI service for the renewal admin console: imports B1/B2/B3 hierarchy
spreadsheets, serves per-level distributions with operator-configured
percentage overrides, and manages phone brands.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, cache, errors and dependencies
    - models: Pydantic schemas, enums and path filters
    - services: Business logic services
    - sql: DDL and parameterized SQL queries
"""

__version__ = "1.0.0"
