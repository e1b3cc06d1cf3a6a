# app/domains/usr/schemas.py

"""
API data transfer objects (DTOs) of the 'usr' domain (users and departments).
"""

from typing import Optional

from pydantic import field_validator
from sqlmodel import Field

from app.domains.shared.schemas import CamelSchema
from . import models as usr_models


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# =============================================================================
# 1. Department schemas
# =============================================================================
class DepartmentBase(CamelSchema):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20)

    @field_validator("name", "code", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentRead(DepartmentBase):
    id: int


# =============================================================================
# 2. User schemas
# =============================================================================
class UserBase(CamelSchema):
    username: str = Field(..., min_length=1, max_length=50)
    full_name: Optional[str] = Field(None, max_length=100)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.USER, description="User role")
    department_id: Optional[int] = None

    @field_validator("username", "full_name", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class UserCreate(UserBase):
    """Schema used by POST /users and by the user import."""
    password: str = Field(..., min_length=6, max_length=128)


class UserUpdate(CamelSchema):
    """Partial update; `password` is hashed by the storage layer."""
    full_name: Optional[str] = Field(None, max_length=100)
    role: Optional[usr_models.UserRole] = None
    department_id: Optional[int] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class UserRead(CamelSchema):
    """
    Sanitized user projection returned by every endpoint.
    Neither the password nor its hash is ever part of it.
    """
    id: int
    username: str
    role: usr_models.UserRole
    full_name: Optional[str] = None
    department_id: Optional[int] = None


class PasswordReset(CamelSchema):
    new_password: str = Field(..., min_length=6, max_length=128)


# =============================================================================
# 3. Authentication schemas
# =============================================================================
class LoginRequest(CamelSchema):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
