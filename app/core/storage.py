# app/core/storage.py

"""
Persistence adapter.

`Storage` is the capability interface the routers and the import service
talk to. Two interchangeable implementations satisfy it:

- `MemStorage` keeps every table in process memory (single instance only,
  no locking, last write wins).
- `DatabaseStorage` wraps one `AsyncSession` and delegates to the
  `CRUDBase` objects of each domain.

The implementation is picked once at startup (`settings.STORAGE_BACKEND`)
through a storage provider stored on `app.state`, and reaches the routes
through the `get_storage` dependency.
"""

import logging
from contextlib import asynccontextmanager
from itertools import count
from typing import AsyncIterator, Callable, Dict, List, Optional, Protocol

from fastapi import Request
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.security import get_password_hash
from app.domains.usr import crud as usr_crud
from app.domains.usr import models as usr_models
from app.domains.usr import schemas as usr_schemas
from app.domains.fms import crud as fms_crud
from app.domains.fms import models as fms_models
from app.domains.fms import schemas as fms_schemas

logger = logging.getLogger(__name__)


class Storage(Protocol):
    # departments
    async def list_departments(self) -> List[usr_models.Department]: ...
    async def get_department(self, id: int) -> Optional[usr_models.Department]: ...
    async def get_department_by_code(self, code: str) -> Optional[usr_models.Department]: ...
    async def create_department(self, department: usr_schemas.DepartmentCreate) -> usr_models.Department: ...

    # equipment
    async def list_equipment(
        self,
        *,
        department_id: Optional[int] = None,
        status: Optional[fms_models.EquipmentStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[fms_models.Equipment]: ...
    async def get_equipment(self, id: int) -> Optional[fms_models.Equipment]: ...
    async def get_equipment_by_code(self, equipment_id: str) -> Optional[fms_models.Equipment]: ...
    async def create_equipment(self, equipment: fms_schemas.EquipmentCreate) -> fms_models.Equipment: ...
    async def update_equipment(self, id: int, updates: fms_schemas.EquipmentUpdate) -> fms_models.Equipment: ...

    # maintenance
    async def list_maintenance(self, *, department_id: Optional[int] = None) -> List[fms_models.Maintenance]: ...
    async def list_maintenance_by_equipment(self, equipment_id: int) -> List[fms_models.Maintenance]: ...
    async def create_maintenance(self, maintenance: fms_schemas.MaintenanceCreate) -> fms_models.Maintenance: ...

    # users
    async def list_users(self) -> List[usr_models.User]: ...
    async def get_user(self, id: int) -> Optional[usr_models.User]: ...
    async def get_user_by_username(self, username: str) -> Optional[usr_models.User]: ...
    async def create_user(self, user: usr_schemas.UserCreate) -> usr_models.User: ...
    async def update_user(self, id: int, updates: usr_schemas.UserUpdate) -> usr_models.User: ...


# =============================================================================
# 1. in-memory implementation
# =============================================================================
class MemStorage:
    """Map-backed storage; ids come from one increasing counter per table."""

    def __init__(self):
        self.departments: Dict[int, usr_models.Department] = {}
        self.equipment: Dict[int, fms_models.Equipment] = {}
        self.maintenance: Dict[int, fms_models.Maintenance] = {}
        self.users: Dict[int, usr_models.User] = {}
        self._ids = {name: count(1) for name in ("departments", "equipment", "maintenance", "users")}

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    # --- departments ---
    async def list_departments(self) -> List[usr_models.Department]:
        return list(self.departments.values())

    async def get_department(self, id: int) -> Optional[usr_models.Department]:
        return self.departments.get(id)

    async def get_department_by_code(self, code: str) -> Optional[usr_models.Department]:
        return next((d for d in self.departments.values() if d.code == code), None)

    async def create_department(self, department: usr_schemas.DepartmentCreate) -> usr_models.Department:
        db_obj = usr_models.Department.model_validate(department)
        db_obj.id = self._next_id("departments")
        self.departments[db_obj.id] = db_obj
        return db_obj

    # --- equipment ---
    async def list_equipment(
        self,
        *,
        department_id: Optional[int] = None,
        status: Optional[fms_models.EquipmentStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[fms_models.Equipment]:
        rows = list(self.equipment.values())
        if department_id is not None:
            rows = [e for e in rows if e.department_id == department_id]
        if status is not None:
            rows = [e for e in rows if e.status == status]
        if search:
            needle = search.lower()
            rows = [
                e for e in rows
                if needle in e.equipment_name.lower()
                or needle in e.equipment_id.lower()
                or needle in e.model.lower()
            ]
        end = None if limit is None else skip + limit
        return rows[skip:end]

    async def get_equipment(self, id: int) -> Optional[fms_models.Equipment]:
        return self.equipment.get(id)

    async def get_equipment_by_code(self, equipment_id: str) -> Optional[fms_models.Equipment]:
        return next((e for e in self.equipment.values() if e.equipment_id == equipment_id), None)

    async def create_equipment(self, equipment: fms_schemas.EquipmentCreate) -> fms_models.Equipment:
        db_obj = fms_models.Equipment.model_validate(equipment)
        db_obj.id = self._next_id("equipment")
        self.equipment[db_obj.id] = db_obj
        return db_obj

    async def update_equipment(self, id: int, updates: fms_schemas.EquipmentUpdate) -> fms_models.Equipment:
        db_obj = self.equipment.get(id)
        if db_obj is None:
            raise NotFoundError("Equipment", id)
        for key, value in updates.model_dump(exclude_unset=True).items():
            setattr(db_obj, key, value)
        return db_obj

    # --- maintenance ---
    async def list_maintenance(self, *, department_id: Optional[int] = None) -> List[fms_models.Maintenance]:
        rows = list(self.maintenance.values())
        if department_id is None:
            return rows
        owned = {e.id for e in self.equipment.values() if e.department_id == department_id}
        return [m for m in rows if m.equipment_id in owned]

    async def list_maintenance_by_equipment(self, equipment_id: int) -> List[fms_models.Maintenance]:
        return [m for m in self.maintenance.values() if m.equipment_id == equipment_id]

    async def create_maintenance(self, maintenance: fms_schemas.MaintenanceCreate) -> fms_models.Maintenance:
        db_obj = fms_models.Maintenance.model_validate(maintenance)
        db_obj.id = self._next_id("maintenance")
        self.maintenance[db_obj.id] = db_obj
        return db_obj

    # --- users ---
    async def list_users(self) -> List[usr_models.User]:
        return list(self.users.values())

    async def get_user(self, id: int) -> Optional[usr_models.User]:
        return self.users.get(id)

    async def get_user_by_username(self, username: str) -> Optional[usr_models.User]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def create_user(self, user: usr_schemas.UserCreate) -> usr_models.User:
        user_data = user.model_dump(exclude={"password"})
        db_obj = usr_models.User(
            **user_data,
            id=self._next_id("users"),
            password_hash=get_password_hash(user.password),
        )
        self.users[db_obj.id] = db_obj
        return db_obj

    async def update_user(self, id: int, updates: usr_schemas.UserUpdate) -> usr_models.User:
        db_obj = self.users.get(id)
        if db_obj is None:
            raise NotFoundError("User", id)
        update_data = updates.model_dump(exclude_unset=True)
        password = update_data.pop("password", None)
        for key, value in update_data.items():
            setattr(db_obj, key, value)
        if password:
            db_obj.password_hash = get_password_hash(password)
        return db_obj


# =============================================================================
# 2. SQL implementation
# =============================================================================
class DatabaseStorage:
    """Storage over one AsyncSession; every write commits immediately."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- departments ---
    async def list_departments(self) -> List[usr_models.Department]:
        return await usr_crud.department.get_multi(self.db)

    async def get_department(self, id: int) -> Optional[usr_models.Department]:
        return await usr_crud.department.get(self.db, id)

    async def get_department_by_code(self, code: str) -> Optional[usr_models.Department]:
        return await usr_crud.department.get_by_code(self.db, code=code)

    async def create_department(self, department: usr_schemas.DepartmentCreate) -> usr_models.Department:
        return await usr_crud.department.create(self.db, obj_in=department)

    # --- equipment ---
    async def list_equipment(
        self,
        *,
        department_id: Optional[int] = None,
        status: Optional[fms_models.EquipmentStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[fms_models.Equipment]:
        return await fms_crud.equipment.get_filtered(
            self.db, department_id=department_id, status=status, search=search, skip=skip, limit=limit
        )

    async def get_equipment(self, id: int) -> Optional[fms_models.Equipment]:
        return await fms_crud.equipment.get(self.db, id)

    async def get_equipment_by_code(self, equipment_id: str) -> Optional[fms_models.Equipment]:
        return await fms_crud.equipment.get_by_code(self.db, equipment_id=equipment_id)

    async def create_equipment(self, equipment: fms_schemas.EquipmentCreate) -> fms_models.Equipment:
        return await fms_crud.equipment.create(self.db, obj_in=equipment)

    async def update_equipment(self, id: int, updates: fms_schemas.EquipmentUpdate) -> fms_models.Equipment:
        db_obj = await fms_crud.equipment.get(self.db, id)
        if db_obj is None:
            raise NotFoundError("Equipment", id)
        return await fms_crud.equipment.update(self.db, db_obj=db_obj, obj_in=updates)

    # --- maintenance ---
    async def list_maintenance(self, *, department_id: Optional[int] = None) -> List[fms_models.Maintenance]:
        if department_id is None:
            return await fms_crud.maintenance.get_multi(self.db)
        return await fms_crud.maintenance.get_by_department(self.db, department_id=department_id)

    async def list_maintenance_by_equipment(self, equipment_id: int) -> List[fms_models.Maintenance]:
        return await fms_crud.maintenance.get_by_equipment(self.db, equipment_id=equipment_id)

    async def create_maintenance(self, maintenance: fms_schemas.MaintenanceCreate) -> fms_models.Maintenance:
        return await fms_crud.maintenance.create(self.db, obj_in=maintenance)

    # --- users ---
    async def list_users(self) -> List[usr_models.User]:
        return await usr_crud.user.get_multi(self.db)

    async def get_user(self, id: int) -> Optional[usr_models.User]:
        return await usr_crud.user.get(self.db, id)

    async def get_user_by_username(self, username: str) -> Optional[usr_models.User]:
        return await usr_crud.user.get_by_username(self.db, username=username)

    async def create_user(self, user: usr_schemas.UserCreate) -> usr_models.User:
        return await usr_crud.user.create(self.db, obj_in=user)

    async def update_user(self, id: int, updates: usr_schemas.UserUpdate) -> usr_models.User:
        db_obj = await usr_crud.user.get(self.db, id)
        if db_obj is None:
            raise NotFoundError("User", id)
        return await usr_crud.user.update(self.db, db_obj=db_obj, obj_in=updates)


# =============================================================================
# 3. providers (chosen at startup) and the FastAPI dependency
# =============================================================================
class MemoryStorageProvider:
    def __init__(self, storage: Optional[MemStorage] = None):
        self.storage = storage or MemStorage()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Storage]:
        yield self.storage


class DatabaseStorageProvider:
    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Storage]:
        async with self.session_factory() as db:
            yield DatabaseStorage(db)


def build_storage_provider(backend: str):
    """Return the provider for `memory` or `database`."""
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorageProvider()
    if backend == "database":
        from app.core.database import AsyncSessionLocal

        logger.info("Using database storage")
        return DatabaseStorageProvider(AsyncSessionLocal)
    raise ValueError(f"Unknown storage backend: {backend}")


async def get_storage(request: Request) -> AsyncIterator[Storage]:
    """FastAPI dependency yielding the storage for the current request."""
    provider = getattr(request.app.state, "storage_provider", None)
    if provider is None:
        raise RuntimeError("Storage provider is not initialized")
    async with provider.session() as storage:
        yield storage


# =============================================================================
# 4. seed data
# =============================================================================
DEFAULT_DEPARTMENTS = [
    ("Emergency", "ER"),
    ("Intensive Care Unit", "ICU"),
    ("Radiology", "RAD"),
    ("Surgery", "SURG"),
    ("Laboratory", "LAB"),
]


async def seed_defaults(storage: Storage, *, admin_username: str, admin_password: str) -> bool:
    """
    Create the default departments and the admin account when there are no
    users yet. Returns True when anything was seeded.
    """
    if await storage.list_users():
        return False

    for name, code in DEFAULT_DEPARTMENTS:
        if not await storage.get_department_by_code(code):
            await storage.create_department(usr_schemas.DepartmentCreate(name=name, code=code))

    await storage.create_user(usr_schemas.UserCreate(
        username=admin_username,
        password=admin_password,
        full_name="System Administrator",
        role=usr_models.UserRole.ADMIN,
    ))
    logger.info("Seeded default departments and admin account '%s'", admin_username)
    return True
