# tests/conftest.py

from typing import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from app.main import app as main_app
from app.core import dependencies as deps
from app.core.config import settings
from app.core.sessions import MemorySessionStore
from app.core.database import create_db_and_tables
from app.core.storage import DatabaseStorage, MemStorage, Storage

from app.domains.usr import models as usr_models
from app.domains.usr import schemas as usr_schemas
from app.domains.fms import models as fms_models
from app.domains.fms import schemas as fms_schemas


# --- storage and session store ---
# Every test gets a fresh storage and session store, injected through
# dependency overrides (the app lifespan is not run by ASGITransport).
# Storage is in-memory unless a test selects the backend with
# `@pytest.mark.parametrize("storage", BOTH_BACKENDS, indirect=True)`.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
BOTH_BACKENDS = ["memory", "database"]


@pytest_asyncio.fixture(scope="function")
async def storage(request) -> AsyncGenerator[Storage, None]:
    backend = getattr(request, "param", "memory")
    if backend == "memory":
        yield MemStorage()
        return

    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_db_and_tables(engine)
    async with AsyncSession(engine, expire_on_commit=False) as db:
        yield DatabaseStorage(db)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_store() -> MemorySessionStore:
    return MemorySessionStore(settings.SESSION_MAX_AGE_SECONDS)


@pytest.fixture(scope="function", autouse=True)
def override_dependencies(storage: Storage, session_store: MemorySessionStore):
    async def override_get_storage():
        yield storage

    def override_get_session_store():
        return session_store

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides.update({
        deps.get_storage: override_get_storage,
        deps.get_session_store: override_get_session_store,
    })
    yield
    main_app.dependency_overrides.clear()
    main_app.dependency_overrides.update(original_overrides)


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Anonymous client."""
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- departments ---
@pytest_asyncio.fixture(scope="function")
async def test_department_a(storage: Storage) -> usr_models.Department:
    return await storage.create_department(usr_schemas.DepartmentCreate(name="Intensive Care Unit", code="ICU"))


@pytest_asyncio.fixture(scope="function")
async def test_department_b(storage: Storage) -> usr_models.Department:
    return await storage.create_department(usr_schemas.DepartmentCreate(name="Radiology", code="RAD"))


# --- users ---
@pytest.fixture(scope="function")
def user_factory(storage: Storage) -> Callable[..., Awaitable[usr_models.User]]:
    """Create a user directly in storage (password is hashed by the storage)."""
    async def _create_user(
        username: str,
        password: str,
        role: usr_models.UserRole,
        department_id=None,
        **kwargs,
    ) -> usr_models.User:
        user_in = usr_schemas.UserCreate(
            username=username,
            password=password,
            role=role,
            department_id=department_id,
            **kwargs,
        )
        return await storage.create_user(user_in)
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    return await user_factory("sysadm", "sysadmpass123", role=usr_models.UserRole.ADMIN, full_name="System Admin")


@pytest_asyncio.fixture(scope="function")
async def test_manager_user(user_factory: Callable, test_department_a: usr_models.Department) -> usr_models.User:
    return await user_factory(
        "manager", "managerpass123",
        role=usr_models.UserRole.MANAGER,
        department_id=test_department_a.id,
        full_name="Ward Manager",
    )


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable, test_department_a: usr_models.Department) -> usr_models.User:
    return await user_factory(
        "nurse", "nursepass123",
        role=usr_models.UserRole.USER,
        department_id=test_department_a.id,
        full_name="ICU Nurse",
    )


@pytest_asyncio.fixture(scope="function")
async def test_user_in_other_department(user_factory: Callable, test_department_b: usr_models.Department) -> usr_models.User:
    return await user_factory(
        "radtech", "radtechpass123",
        role=usr_models.UserRole.USER,
        department_id=test_department_b.id,
    )


# --- equipment ---
def make_equipment_in(equipment_id: str = "EQ-0001", department_id=None, **overrides) -> fms_schemas.EquipmentCreate:
    data = {
        "equipment_id": equipment_id,
        "equipment_name": "Patient Monitor",
        "equipment_type": "Monitoring",
        "model": "PM-9000",
        "serial_number": f"SN-{equipment_id}",
        "country_of_origin": "Germany",
        "manufacturer": "MedTech GmbH",
        "unit_price": Decimal("15000"),
        "vat": Decimal("15"),
        "funding_source": "Government",
        "supplier": "Health Supplies Ltd",
        "status": fms_models.EquipmentStatus.ACTIVE,
        "purchase_date": date(2024, 1, 15),
        "warranty_expiry": date(2027, 1, 15),
        "department_id": department_id,
    }
    data.update(overrides)
    return fms_schemas.EquipmentCreate(**data)


@pytest.fixture(scope="function")
def equipment_factory(storage: Storage) -> Callable[..., Awaitable[fms_models.Equipment]]:
    async def _create_equipment(equipment_id: str = "EQ-0001", department_id=None, **overrides) -> fms_models.Equipment:
        return await storage.create_equipment(make_equipment_in(equipment_id, department_id, **overrides))
    return _create_equipment


@pytest_asyncio.fixture(scope="function")
async def equipment_in_a(equipment_factory: Callable, test_department_a: usr_models.Department) -> fms_models.Equipment:
    return await equipment_factory("ICU-001", test_department_a.id, equipment_name="Ventilator", model="VX-200")


@pytest_asyncio.fixture(scope="function")
async def equipment_in_b(equipment_factory: Callable, test_department_b: usr_models.Department) -> fms_models.Equipment:
    return await equipment_factory("RAD-001", test_department_b.id, equipment_name="X-Ray Unit", model="XR-10")


# --- logged-in clients ---
# Each client logs in through POST /api/auth/login and keeps the session
# cookie in its own cookie jar.
@pytest.fixture(scope="function")
def authorized_client_factory() -> Callable[[usr_models.User, str], AsyncGenerator[AsyncClient, None]]:
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            res = await ac.post("/api/auth/login", json={"username": user.username, "password": password})
            if res.status_code != 200:
                pytest.fail(f"Login failed for {user.username}: {res.text}")
            yield ac
    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(authorized_client_factory: Callable, test_admin_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(test_admin_user, "sysadmpass123") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def manager_client(authorized_client_factory: Callable, test_manager_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(test_manager_user, "managerpass123") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def user_client(authorized_client_factory: Callable, test_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(test_user, "nursepass123") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def other_user_client(authorized_client_factory: Callable, test_user_in_other_department: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(test_user_in_other_department, "radtechpass123") as ac:
        yield ac
