"""
Backend API package initialization.

This package contains the FastAPI router modules for the Renew Admin API:
- data: import, B1/B2/B3 distributions, details and percentage overrides
- brands: phone brand CRUD
- auth: login, token validation and seed admin creation

All routers are mounted under ``/api`` by ``api_router``.
"""

from fastapi import APIRouter

from renew_admin.api.data import router as data_router
from renew_admin.api.brands import router as brands_router
from renew_admin.api.auth import router as auth_router

# Create main API router
api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(data_router, prefix="/data", tags=["data"])
api_router.include_router(brands_router, prefix="/phone-brands", tags=["phone-brands"])

__all__ = [
    "api_router",
    "data_router",
    "brands_router",
    "auth_router",
]
