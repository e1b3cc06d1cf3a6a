# app/domains/fms/models.py

"""
ORM models of the 'fms' domain (medical equipment and maintenance records).
"""

from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlmodel import Field, Relationship, SQLModel

from app.domains.usr.models import Department


class EquipmentStatus(str, Enum):
    ACTIVE = "Active"
    MAINTENANCE = "Maintenance"
    INACTIVE = "Inactive"
    PENDING_MAINTENANCE = "PendingMaintenance"


# =============================================================================
# 1. equipment table
# =============================================================================
class EquipmentBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="Equipment row ID")
    equipment_id: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="Business equipment code")
    equipment_name: str = Field(max_length=200, description="Equipment name")
    equipment_type: str = Field(max_length=100, description="Equipment type")
    model: str = Field(max_length=100, description="Model")
    serial_number: str = Field(max_length=100, description="Serial number")
    country_of_origin: str = Field(max_length=100, description="Country of origin")
    manufacturer: str = Field(max_length=200, description="Manufacturer")
    unit_price: Decimal = Field(max_digits=14, decimal_places=2, description="Unit price")
    vat: Decimal = Field(max_digits=5, decimal_places=2, description="VAT percentage (0-100)")
    funding_source: str = Field(max_length=200, description="Funding source")
    supplier: str = Field(max_length=200, description="Supplier")
    status: EquipmentStatus = Field(default=EquipmentStatus.ACTIVE, description="Operational status")
    purchase_date: date = Field(description="Purchase date")
    warranty_expiry: date = Field(description="Warranty expiry date")
    department_id: Optional[int] = Field(default=None, foreign_key="departments.id", description="Owning department ID (FK)")


class Equipment(EquipmentBase, table=True):
    __tablename__ = "equipment"

    department: Optional[Department] = Relationship(back_populates="equipment")
    maintenance_records: List["Maintenance"] = Relationship(back_populates="equipment")


# =============================================================================
# 2. maintenance table
# =============================================================================
class MaintenanceBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="Maintenance record ID")
    equipment_id: Optional[int] = Field(default=None, foreign_key="equipment.id", description="Equipment row ID (FK)")
    start_date: datetime = Field(description="Start of the maintenance")
    end_date: datetime = Field(description="End of the maintenance")
    maintenance_type: str = Field(max_length=50, description="Maintenance type (Corrective, Preventive, ...)")
    performed_by: str = Field(max_length=200, description="Technician or vendor")
    notes: Optional[str] = Field(default=None, description="Notes")
    status: str = Field(default="Pending", max_length=30, description="Request status")


class Maintenance(MaintenanceBase, table=True):
    __tablename__ = "maintenance"

    equipment: Optional[Equipment] = Relationship(back_populates="maintenance_records")
