"""
FastAPI router for authentication.

Key Endpoints:
- POST /auth/login          exchange username/password for a session token
- GET  /auth/validate       confirm a bearer token and return its user
- POST /auth/create-admin   recreate the seed admin account

Tokens are returned in the body and sent back as ``Authorization: Bearer``.
"""

import logging

from fastapi import APIRouter, HTTPException

from renew_admin.core.dependencies import AuthServiceDep, CurrentUserDep
from renew_admin.core.errors import StoreError
from renew_admin.models.schemas import (
    CreateAdminResponse,
    LoginRequest,
    LoginResponse,
    TokenValidationResponse,
)
from renew_admin.services.auth import create_access_token, to_user_info


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """
    Raises:
        HTTPException 400: Username or password missing.
        HTTPException 401: Unknown user or wrong password.
    """
    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    try:
        user = await auth_service.authenticate(body.username, body.password)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=e.message)

    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user.id, auth_service.settings)
    return LoginResponse(token=token, user=to_user_info(user))


@router.get("/validate", response_model=TokenValidationResponse)
async def validate_token(user: CurrentUserDep) -> TokenValidationResponse:
    return TokenValidationResponse(valid=True, user=to_user_info(user))


@router.post("/create-admin", response_model=CreateAdminResponse)
async def create_admin(auth_service: AuthServiceDep) -> CreateAdminResponse:
    """Delete and recreate the seed admin with the configured password."""
    try:
        admin = await auth_service.seed_admin(reset=True)
    except Exception as e:
        logger.error(f"Error creating admin: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create admin user")

    return CreateAdminResponse(message="Admin user created successfully", username=admin.username)


__all__ = ["router"]
