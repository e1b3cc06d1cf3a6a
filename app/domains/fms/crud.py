# app/domains/fms/crud.py

"""
SQL-backed CRUD operations of the 'fms' domain (equipment and maintenance).

These are used by `DatabaseStorage` only; routers go through the `Storage`
interface. Module-level singletons (`equipment`, `maintenance`) are the
entry points, e.g. `await fms_crud.equipment.get_filtered(db, search="pump")`.
"""

from typing import List, Optional

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from . import models as fms_models
from . import schemas as fms_schemas


# =============================================================================
# 1. equipment
# =============================================================================
class CRUDEquipment(CRUDBase[fms_models.Equipment, fms_schemas.EquipmentCreate, fms_schemas.EquipmentUpdate]):
    """
    CRUD for the `equipment` table.
    Create and partial update come from `CRUDBase`; the business code
    (`equipment_id`) is unique and checked by the routers before writing.
    """
    def __init__(self):
        super().__init__(model=fms_models.Equipment)

    async def get_by_code(self, db: AsyncSession, *, equipment_id: str) -> Optional[fms_models.Equipment]:
        """Look up equipment by its business code (not the row id)."""
        return await self.get_by_attribute(db, attribute="equipment_id", value=equipment_id)

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        department_id: Optional[int] = None,
        status: Optional[fms_models.EquipmentStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[fms_models.Equipment]:
        """
        Equipment list with the list-screen filters. `search` is a
        case-insensitive substring match on name, business code and model.
        """
        query = select(self.model)
        conditions = []

        if department_id is not None:
            conditions.append(self.model.department_id == department_id)
        if status is not None:
            conditions.append(self.model.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(self.model.equipment_name).like(pattern),
                func.lower(self.model.equipment_id).like(pattern),
                func.lower(self.model.model).like(pattern),
            ))

        if conditions:
            query = query.where(*conditions)

        query = query.order_by(self.model.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())


equipment = CRUDEquipment()


# =============================================================================
# 2. maintenance
# =============================================================================
class CRUDMaintenance(CRUDBase[fms_models.Maintenance, fms_schemas.MaintenanceCreate, fms_schemas.MaintenanceCreate]):
    """
    CRUD for the `maintenance` table.
    Records are append-only: there is no update endpoint, so the update
    schema type is only a placeholder for `CRUDBase`.
    """
    def __init__(self):
        super().__init__(model=fms_models.Maintenance)

    async def get_by_equipment(self, db: AsyncSession, *, equipment_id: int) -> List[fms_models.Maintenance]:
        """Maintenance history of one equipment row (by row id), oldest first."""
        return await self.get_multi(db, equipment_id=equipment_id)

    async def get_by_department(self, db: AsyncSession, *, department_id: int) -> List[fms_models.Maintenance]:
        """Maintenance rows whose equipment belongs to the department."""
        query = (
            select(self.model)
            .join(fms_models.Equipment, self.model.equipment_id == fms_models.Equipment.id)
            .where(fms_models.Equipment.department_id == department_id)
            .order_by(self.model.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())


maintenance = CRUDMaintenance()
