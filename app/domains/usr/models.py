# app/domains/usr/models.py

"""
ORM models of the 'usr' domain (departments, users).

Each class maps one table through SQLModel; Field declares the column
constraints and Relationship the links between tables.
"""

from typing import Optional, List, TYPE_CHECKING
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.domains.fms.models import Equipment


# =============================================================================
# user roles (RBAC)
# =============================================================================
class UserRole(str, Enum):
    """
    User roles. `admin` and `manager` see every department; `user` is scoped
    to its own department.
    """
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"

    @property
    def is_elevated(self) -> bool:
        return self in (UserRole.ADMIN, UserRole.MANAGER)


# =============================================================================
# 1. departments table
# =============================================================================
class DepartmentBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="Department ID")
    name: str = Field(max_length=100, description="Department name")
    code: str = Field(max_length=20, sa_column_kwargs={"unique": True}, description="Department code (e.g. ICU, RAD)")


class Department(DepartmentBase, table=True):
    __tablename__ = "departments"

    users: List["User"] = Relationship(back_populates="department")
    equipment: List["Equipment"] = Relationship(back_populates="department")


# =============================================================================
# 2. users table
# =============================================================================
class UserBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="User ID")
    username: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="Login name")
    password_hash: str = Field(max_length=255, description="Hashed password")
    full_name: Optional[str] = Field(default=None, max_length=100, description="Full name")
    role: UserRole = Field(default=UserRole.USER, description="User role")
    department_id: Optional[int] = Field(default=None, foreign_key="departments.id", description="Department ID (FK)")


class User(UserBase, table=True):
    __tablename__ = "users"

    department: Optional["Department"] = Relationship(back_populates="users")
