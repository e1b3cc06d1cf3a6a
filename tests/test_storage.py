# tests/test_storage.py

"""
Storage layer tests. Every test runs against both `MemStorage` and
`DatabaseStorage` (aiosqlite in-memory database) to show that the two
implementations behave the same.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import create_db_and_tables
from app.core.exceptions import ConflictError, NotFoundError
from app.core.security import verify_password
from app.core.sessions import MemorySessionStore
from app.core.storage import (
    DatabaseStorage,
    DatabaseStorageProvider,
    MemStorage,
    MemoryStorageProvider,
    build_storage_provider,
    seed_defaults,
)
from app.domains.usr import models as usr_models
from app.domains.usr import schemas as usr_schemas
from app.domains.fms import models as fms_models
from app.domains.fms import schemas as fms_schemas
from tests.conftest import make_equipment_in

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function", params=["memory", "database"])
async def storage_impl(request, session_factory):
    if request.param == "memory":
        yield MemStorage()
        return
    async with session_factory() as db:
        yield DatabaseStorage(db)


async def make_departments(storage):
    icu = await storage.create_department(usr_schemas.DepartmentCreate(name="Intensive Care Unit", code="ICU"))
    rad = await storage.create_department(usr_schemas.DepartmentCreate(name="Radiology", code="RAD"))
    return icu, rad


def maintenance_in(equipment_id, maintenance_type="Corrective") -> fms_schemas.MaintenanceCreate:
    return fms_schemas.MaintenanceCreate(
        equipment_id=equipment_id,
        start_date=datetime(2025, 1, 10, 8, 0),
        end_date=datetime(2025, 1, 10, 12, 0),
        maintenance_type=maintenance_type,
        performed_by="Biomed",
    )


# =============================================================================
# 1. departments
# =============================================================================
@pytest.mark.asyncio
async def test_departments(storage_impl):
    icu, rad = await make_departments(storage_impl)

    assert icu.id < rad.id
    assert (await storage_impl.get_department(icu.id)).code == "ICU"
    assert (await storage_impl.get_department_by_code("RAD")).id == rad.id
    assert await storage_impl.get_department(999) is None
    assert await storage_impl.get_department_by_code("NOPE") is None
    assert [d.code for d in await storage_impl.list_departments()] == ["ICU", "RAD"]


# =============================================================================
# 2. equipment
# =============================================================================
@pytest.mark.asyncio
async def test_equipment_create_get_round_trip(storage_impl):
    icu, _ = await make_departments(storage_impl)
    equipment_in = make_equipment_in("EQ-1", icu.id, unit_price=Decimal("1234.5"), vat=Decimal("12"))

    created = await storage_impl.create_equipment(equipment_in)
    fetched = await storage_impl.get_equipment(created.id)

    assert fetched is not None
    read = fms_schemas.EquipmentRead.model_validate(fetched)
    expected = equipment_in.model_dump()
    assert read.model_dump(exclude={"id"}) == expected
    assert read.unit_price == Decimal("1234.50")
    assert read.model_dump(mode="json", by_alias=True)["vat"] == "12.00"
    assert (await storage_impl.get_equipment_by_code("EQ-1")).id == created.id


@pytest.mark.asyncio
async def test_equipment_ids_increase(storage_impl):
    first = await storage_impl.create_equipment(make_equipment_in("EQ-1"))
    second = await storage_impl.create_equipment(make_equipment_in("EQ-2"))
    assert second.id > first.id


@pytest.mark.asyncio
async def test_get_missing_equipment_is_none(storage_impl):
    assert await storage_impl.get_equipment(999) is None
    assert await storage_impl.get_equipment_by_code("GHOST") is None


@pytest.mark.asyncio
async def test_update_equipment_partial(storage_impl):
    created = await storage_impl.create_equipment(make_equipment_in("EQ-1"))

    updated = await storage_impl.update_equipment(
        created.id, fms_schemas.EquipmentUpdate(status=fms_models.EquipmentStatus.MAINTENANCE)
    )

    assert updated.status == fms_models.EquipmentStatus.MAINTENANCE
    assert updated.equipment_name == "Patient Monitor"
    assert (await storage_impl.get_equipment(created.id)).status == fms_models.EquipmentStatus.MAINTENANCE


@pytest.mark.asyncio
async def test_update_missing_equipment_raises_and_creates_nothing(storage_impl):
    with pytest.raises(NotFoundError):
        await storage_impl.update_equipment(999, fms_schemas.EquipmentUpdate(status=fms_models.EquipmentStatus.INACTIVE))
    assert await storage_impl.list_equipment() == []


@pytest.mark.asyncio
async def test_list_equipment_filters(storage_impl):
    icu, rad = await make_departments(storage_impl)
    await storage_impl.create_equipment(make_equipment_in("ICU-1", icu.id, equipment_name="Ventilator"))
    await storage_impl.create_equipment(make_equipment_in("ICU-2", icu.id, status=fms_models.EquipmentStatus.INACTIVE))
    await storage_impl.create_equipment(make_equipment_in("RAD-1", rad.id, model="CT-64"))

    async def codes(**kwargs):
        return [e.equipment_id for e in await storage_impl.list_equipment(**kwargs)]

    assert await codes() == ["ICU-1", "ICU-2", "RAD-1"]
    assert await codes(department_id=icu.id) == ["ICU-1", "ICU-2"]
    assert await codes(status=fms_models.EquipmentStatus.INACTIVE) == ["ICU-2"]
    assert await codes(search="VENTI") == ["ICU-1"]
    assert await codes(search="ct-6") == ["RAD-1"]
    assert await codes(search="icu-") == ["ICU-1", "ICU-2"]
    assert await codes(department_id=icu.id, status=fms_models.EquipmentStatus.ACTIVE) == ["ICU-1"]
    assert await codes(skip=1, limit=1) == ["ICU-2"]


# =============================================================================
# 3. maintenance
# =============================================================================
@pytest.mark.asyncio
async def test_maintenance_by_equipment_and_department(storage_impl):
    icu, rad = await make_departments(storage_impl)
    icu_pump = await storage_impl.create_equipment(make_equipment_in("ICU-1", icu.id))
    rad_ct = await storage_impl.create_equipment(make_equipment_in("RAD-1", rad.id))

    await storage_impl.create_maintenance(maintenance_in(icu_pump.id))
    await storage_impl.create_maintenance(maintenance_in(rad_ct.id))
    await storage_impl.create_maintenance(maintenance_in(icu_pump.id, "Preventive"))

    assert len(await storage_impl.list_maintenance()) == 3
    icu_rows = await storage_impl.list_maintenance(department_id=icu.id)
    assert [m.maintenance_type for m in icu_rows] == ["Corrective", "Preventive"]
    assert all(m.equipment_id == icu_pump.id for m in icu_rows)
    assert [m.equipment_id for m in await storage_impl.list_maintenance_by_equipment(rad_ct.id)] == [rad_ct.id]


@pytest.mark.asyncio
async def test_maintenance_defaults(storage_impl):
    equipment = await storage_impl.create_equipment(make_equipment_in("EQ-1"))
    record = await storage_impl.create_maintenance(maintenance_in(equipment.id))
    assert record.status == "Pending"
    assert record.notes is None


# =============================================================================
# 4. users
# =============================================================================
@pytest.mark.asyncio
async def test_user_password_is_hashed(storage_impl):
    user = await storage_impl.create_user(usr_schemas.UserCreate(username="nurse", password="secret1"))

    assert user.password_hash != "secret1"
    assert verify_password("secret1", user.password_hash)
    assert user.role == usr_models.UserRole.USER
    assert (await storage_impl.get_user_by_username("nurse")).id == user.id
    assert await storage_impl.get_user_by_username("ghost") is None


@pytest.mark.asyncio
async def test_update_user_password(storage_impl):
    user = await storage_impl.create_user(usr_schemas.UserCreate(username="nurse", password="secret1"))

    await storage_impl.update_user(user.id, usr_schemas.UserUpdate(password="secret2"))

    stored = await storage_impl.get_user(user.id)
    assert verify_password("secret2", stored.password_hash)
    assert not verify_password("secret1", stored.password_hash)


@pytest.mark.asyncio
async def test_update_missing_user_raises(storage_impl):
    with pytest.raises(NotFoundError):
        await storage_impl.update_user(999, usr_schemas.UserUpdate(full_name="Nobody"))
    assert await storage_impl.list_users() == []


@pytest.mark.asyncio
async def test_seed_defaults(storage_impl):
    assert await seed_defaults(storage_impl, admin_username="admin", admin_password="admin123") is True
    assert await seed_defaults(storage_impl, admin_username="admin", admin_password="admin123") is False

    admin = await storage_impl.get_user_by_username("admin")
    assert admin.role == usr_models.UserRole.ADMIN
    assert verify_password("admin123", admin.password_hash)
    assert {d.code for d in await storage_impl.list_departments()} == {"ER", "ICU", "RAD", "SURG", "LAB"}


# =============================================================================
# 5. database specifics and providers
# =============================================================================
@pytest.mark.asyncio
async def test_database_unique_constraint_is_conflict(session_factory):
    async with session_factory() as db:
        storage = DatabaseStorage(db)
        await storage.create_equipment(make_equipment_in("EQ-1"))
        with pytest.raises(ConflictError):
            await storage.create_equipment(make_equipment_in("EQ-1"))
        # the session is still usable after the rollback
        assert [e.equipment_id for e in await storage.list_equipment()] == ["EQ-1"]


@pytest.mark.asyncio
async def test_database_provider_yields_database_storage(session_factory):
    provider = DatabaseStorageProvider(session_factory)
    async with provider.session() as storage:
        assert isinstance(storage, DatabaseStorage)
        await storage.create_department(usr_schemas.DepartmentCreate(name="Surgery", code="SURG"))

    # a new session sees the committed row
    async with provider.session() as storage:
        assert (await storage.get_department_by_code("SURG")).name == "Surgery"


@pytest.mark.asyncio
async def test_memory_provider_shares_one_storage():
    provider = build_storage_provider("memory")
    assert isinstance(provider, MemoryStorageProvider)
    async with provider.session() as first:
        await first.create_department(usr_schemas.DepartmentCreate(name="Surgery", code="SURG"))
    async with provider.session() as second:
        assert second is first
        assert (await second.get_department_by_code("SURG")) is not None


@pytest.mark.asyncio
async def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        build_storage_provider("redis")


# =============================================================================
# 6. session store
# =============================================================================
class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_session_store_sliding_expiry():
    clock = FakeClock()
    store = MemorySessionStore(max_age_seconds=60, clock=clock)
    sid = await store.create(7)

    clock.now += 50
    assert await store.get(sid) == 7      # refreshed to now + 60
    clock.now += 50
    assert await store.get(sid) == 7
    clock.now += 61
    assert await store.get(sid) is None


@pytest.mark.asyncio
async def test_session_store_delete_and_unique_ids():
    store = MemorySessionStore(max_age_seconds=60)
    first = await store.create(1)
    second = await store.create(1)
    assert first != second

    await store.delete(first)
    await store.delete("unknown")
    assert await store.get(first) is None
    assert await store.get(second) == 1
