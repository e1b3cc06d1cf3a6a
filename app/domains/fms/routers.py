# app/domains/fms/routers.py

"""
API endpoints of the 'fms' domain: equipment and maintenance records.

Department-scoped users (`role=user`) only ever see equipment of their own
department, and maintenance records through that equipment.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.core import dependencies as deps
from app.core.exceptions import NotFoundError
from app.core.storage import Storage
from app.services.import_service import ImportService
from app.utils.files import read_upload_rows
from app.domains.shared import schemas as shared_schemas
from app.domains.usr import models as usr_models

from . import models as fms_models
from . import schemas as fms_schemas

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Equipment & Maintenance"],
    responses={404: {"description": "Not found"}},
)


async def _get_accessible_equipment(storage: Storage, equipment_id: int, user: usr_models.User) -> fms_models.Equipment:
    equipment = await storage.get_equipment(equipment_id)
    if not equipment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Equipment not found")
    deps.ensure_department_access(user, equipment.department_id)
    return equipment


async def _check_department_exists(storage: Storage, department_id: Optional[int]) -> None:
    if department_id is not None and not await storage.get_department(department_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department not found")


# =============================================================================
# 1. equipment
# =============================================================================
@router.get("/equipment", response_model=List[fms_schemas.EquipmentRead], summary="List equipment")
async def read_equipment_list(
    status_filter: Optional[fms_models.EquipmentStatus] = Query(None, alias="status"),
    department_id: Optional[int] = Query(None, alias="departmentId"),
    search: Optional[str] = Query(None, description="Substring of name, equipment ID or model"),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    storage: Storage = Depends(deps.get_storage),
    current_user: usr_models.User = Depends(deps.require_auth),
):
    scope = deps.department_scope(current_user, department_id)
    if scope is None and not deps.is_elevated(current_user):
        return []
    return await storage.list_equipment(
        department_id=scope, status=status_filter, search=search, skip=skip, limit=limit
    )


@router.post("/equipment", response_model=fms_schemas.EquipmentRead, summary="Create equipment")
async def create_equipment(
    equipment_in: fms_schemas.EquipmentCreate,
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    if await storage.get_equipment_by_code(equipment_in.equipment_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Equipment ID already exists")
    await _check_department_exists(storage, equipment_in.department_id)
    return await storage.create_equipment(equipment_in)


@router.post("/equipment/import", response_model=shared_schemas.ImportResult, response_model_exclude_none=True, summary="Import equipment from a file")
async def import_equipment(
    file: Optional[UploadFile] = File(None),
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    rows = await read_upload_rows(file)
    return await ImportService(storage).import_equipment(rows)


@router.get("/equipment/{equipment_id}", response_model=fms_schemas.EquipmentRead, summary="Get equipment")
async def read_equipment(
    equipment_id: int,
    storage: Storage = Depends(deps.get_storage),
    current_user: usr_models.User = Depends(deps.require_auth),
):
    return await _get_accessible_equipment(storage, equipment_id, current_user)


@router.patch("/equipment/{equipment_id}", response_model=fms_schemas.EquipmentRead, summary="Update equipment")
async def update_equipment(
    equipment_id: int,
    equipment_in: fms_schemas.EquipmentUpdate,
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    db_equipment = await storage.get_equipment(equipment_id)
    if not db_equipment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Equipment not found")

    if equipment_in.equipment_id and equipment_in.equipment_id != db_equipment.equipment_id:
        if await storage.get_equipment_by_code(equipment_in.equipment_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Equipment ID already exists")
    await _check_department_exists(storage, equipment_in.department_id)

    try:
        return await storage.update_equipment(equipment_id, equipment_in)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Equipment not found")


@router.get("/equipment/{equipment_id}/maintenance", response_model=List[fms_schemas.MaintenanceRead], summary="Maintenance history of one equipment")
async def read_equipment_maintenance(
    equipment_id: int,
    storage: Storage = Depends(deps.get_storage),
    current_user: usr_models.User = Depends(deps.require_auth),
):
    equipment = await _get_accessible_equipment(storage, equipment_id, current_user)
    return await storage.list_maintenance_by_equipment(equipment.id)


# =============================================================================
# 2. maintenance
# =============================================================================
@router.get("/maintenance", response_model=List[fms_schemas.MaintenanceRead], summary="List maintenance records")
async def read_maintenance_list(
    storage: Storage = Depends(deps.get_storage),
    current_user: usr_models.User = Depends(deps.require_auth),
):
    scope = deps.department_scope(current_user)
    if scope is None and not deps.is_elevated(current_user):
        return []
    return await storage.list_maintenance(department_id=scope)


@router.post("/maintenance", response_model=fms_schemas.MaintenanceRead, summary="Request maintenance")
async def create_maintenance(
    maintenance_in: fms_schemas.MaintenanceCreate,
    storage: Storage = Depends(deps.get_storage),
    current_user: usr_models.User = Depends(deps.require_auth),
):
    """
    File a maintenance record. The referenced equipment is switched to
    `PendingMaintenance` before the record is stored (two separate writes).
    """
    if maintenance_in.equipment_id is not None:
        equipment = await _get_accessible_equipment(storage, maintenance_in.equipment_id, current_user)
    else:
        deps.ensure_department_access(current_user, None)
        equipment = None

    if not maintenance_in.performed_by:
        maintenance_in = maintenance_in.model_copy(
            update={"performed_by": current_user.full_name or current_user.username}
        )

    if equipment is not None:
        await storage.update_equipment(
            equipment.id,
            fms_schemas.EquipmentUpdate(status=fms_models.EquipmentStatus.PENDING_MAINTENANCE),
        )
        logger.info(f"Equipment {equipment.equipment_id} marked PendingMaintenance by '{current_user.username}'")

    return await storage.create_maintenance(maintenance_in)
