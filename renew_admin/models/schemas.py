"""
Pydantic request/response models for the Renew Admin backend.

This module provides type-safe data validation and serialization for the API
contracts: hierarchical entries, percentage overrides, aggregated distribution
rows, grouped detail rows, phone brands, and authentication payloads.

Field names follow the JSON contract consumed by the admin frontend
(``B1``/``B2``/``B3``, ``totalCount``, ``configuredPercentage``), so models are
serialized without aliasing.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from renew_admin.models.enums import ScopeType, UserRole


# Integer natural percentages stay integers; overrides may be fractional.
Percentage = Union[int, float]


# =============================================================================
# Stored Records
# =============================================================================


class Entry(BaseModel):
    """
    One imported spreadsheet row of the B1 → B2 → B3 → detail hierarchy.

    Entries are created in bulk on import and deleted together on re-import or
    clear; they are never edited individually.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "B1": "129 Zhongshan Residences",
                "B2": "Phones",
                "B3": "Cases",
                "detail": "iPhone 14 case",
            }
        }
    )

    id: Optional[int] = Field(default=None, description="Store-assigned identifier")
    B1: str = Field(..., description="Top-level classification label")
    B2: str = Field(..., description="Second-level classification label")
    B3: str = Field(..., description="Third-level classification label")
    detail: str = Field(default="", description="Free-text detail; may be empty")


class Override(BaseModel):
    """
    An operator-configured percentage for one value under one path.

    Unused path components are stored as empty strings so the uniqueness
    constraint over (scope_type, B1, B2, B3, value) is exact.
    """
    id: Optional[int] = None
    scope_type: ScopeType
    B1: str
    B2: str = ""
    B3: str = ""
    value: str
    percentage: Percentage = Field(..., description="Configured percentage in [0, 100]")


# =============================================================================
# Derived Rows (not persisted)
# =============================================================================


class AggregateRow(BaseModel):
    """
    Distribution row for one B2 or B3 value under its parent path.

    ``percentage`` is the configured override when one exists, otherwise the
    natural ``round(count / totalCount * 100)``.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"value": "Phones", "count": 3, "totalCount": 5, "percentage": 60}
        }
    )

    value: str
    count: int = Field(..., ge=0)
    totalCount: int = Field(..., ge=0)
    percentage: Percentage


class DetailRow(BaseModel):
    """
    Grouped row for one distinct trimmed detail under a B1/B2/B3 path.

    ``percentage`` is always the natural percentage at two decimals;
    ``configuredPercentage`` carries the raw override, if any, without
    replacing it.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "detail": "iPhone 14 case",
                "count": 3,
                "totalCount": 4,
                "percentage": 75.0,
                "configuredPercentage": 60,
            }
        }
    )

    detail: str
    count: int = Field(..., ge=0)
    totalCount: int = Field(..., ge=0)
    percentage: float
    configuredPercentage: Optional[Percentage] = None


# =============================================================================
# Override Requests
# =============================================================================
# Fields are optional and percentages untyped at the model level so that
# missing or non-numeric values produce the 400 responses of the admin
# contract instead of a 422 from FastAPI. The services do the checking.


class B2PercentageUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    b1: Optional[str] = None
    value: Optional[str] = None
    percentage: Any = None


class B3PercentageUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    b1: Optional[str] = None
    b2: Optional[str] = None
    value: Optional[str] = None
    percentage: Any = None


class DetailPercentageUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    b1: Optional[str] = None
    b2: Optional[str] = None
    b3: Optional[str] = None
    detail: Optional[str] = None
    percentage: Any = None


# =============================================================================
# Phone Brands
# =============================================================================


class PhoneBrand(BaseModel):
    """A named entity with a percentage; names are unique."""
    model_config = ConfigDict(
        json_schema_extra={"example": {"id": 3, "name": "Apple", "percentage": 45}}
    )

    id: int
    name: str
    percentage: Percentage


class PhoneBrandCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    percentage: Any = None


class PhoneBrandUpdate(BaseModel):
    """Partial update; omitted fields keep their stored values."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    percentage: Any = None


# =============================================================================
# Authentication
# =============================================================================


class User(BaseModel):
    """Stored account, including the password hash. Never serialized to clients."""
    id: int
    username: str
    password_hash: str
    role: UserRole = UserRole.USER


class UserInfo(BaseModel):
    id: int
    username: str
    role: UserRole


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    user: UserInfo


class TokenValidationResponse(BaseModel):
    valid: bool
    user: UserInfo


# =============================================================================
# Generic Responses
# =============================================================================


class MessageResponse(BaseModel):
    message: str


class CreateAdminResponse(BaseModel):
    message: str
    username: str


class ImportResponse(BaseModel):
    message: str
    count: int


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


__all__ = [
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
