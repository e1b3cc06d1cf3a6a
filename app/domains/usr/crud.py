# app/domains/usr/crud.py

"""
SQL-backed CRUD operations of the 'usr' domain (departments and users).

Passwords never reach the table in plaintext: `CRUDUser` hashes them on
create and on update.
"""

from typing import Optional
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.security import get_password_hash
from . import models as usr_models
from . import schemas as usr_schemas


# =============================================================================
# 1. departments
# =============================================================================
class CRUDDepartment(CRUDBase[usr_models.Department, usr_schemas.DepartmentCreate, usr_schemas.DepartmentCreate]):
    """CRUD for the `departments` table. Department codes are unique."""
    def __init__(self):
        super().__init__(model=usr_models.Department)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[usr_models.Department]:
        """Look up a department by its short code (e.g. 'ICU')."""
        return await self.get_by_attribute(db, attribute="code", value=code)


department = CRUDDepartment()


# =============================================================================
# 2. users
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    """
    CRUD for the `users` table.
    `create` and `update` replace the plaintext `password` of the schema
    with `password_hash`.
    """
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        return await self.get_by_attribute(db, attribute="username", value=username)

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """Create a user, storing the password as a hash."""
        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))
        return await self.save(db, db_user)

    async def update(self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.UserUpdate) -> usr_models.User:
        """Apply only the fields that were set; a new password is re-hashed."""
        update_data = obj_in.model_dump(exclude_unset=True)
        password = update_data.pop("password", None)
        for key, value in update_data.items():
            setattr(db_obj, key, value)
        if password:
            db_obj.password_hash = get_password_hash(password)
        return await self.save(db, db_obj)


user = CRUDUser()
