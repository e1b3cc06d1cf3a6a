# app/domains/fms/schemas.py

"""
API data transfer objects (DTOs) of the 'fms' domain (equipment and maintenance).

`unitPrice` and `vat` are decimals: they are normalized to two decimal places
on input and serialized as strings on output, so that both storage
implementations return exactly the same text.
"""

from typing import Optional
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from pydantic import field_validator, model_validator
from pydantic.alias_generators import to_camel
from sqlmodel import Field

from app.domains.shared.schemas import CamelSchema
from . import models as fms_models

TWO_PLACES = Decimal("0.01")

_TEXT_FIELDS = (
    "equipment_id", "equipment_name", "equipment_type", "model", "serial_number",
    "country_of_origin", "manufacturer", "funding_source", "supplier",
)
NULLABLE_UPDATE_FIELDS = {"department_id"}


def normalize_decimal(value):
    """Quantize numbers and numeric strings to two places; leave anything else to the validator."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return value
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return value
    if not number.is_finite():
        return value
    return number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# =============================================================================
# 1. Equipment schemas
# =============================================================================
class EquipmentBase(CamelSchema):
    equipment_id: str = Field(..., min_length=1, max_length=50)
    equipment_name: str = Field(..., min_length=1, max_length=200)
    equipment_type: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    serial_number: str = Field(..., min_length=1, max_length=100)
    country_of_origin: str = Field(..., min_length=1, max_length=100)
    manufacturer: str = Field(..., min_length=1, max_length=200)
    unit_price: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    vat: Decimal = Field(..., ge=0, le=100, max_digits=5, decimal_places=2)
    funding_source: str = Field(..., min_length=1, max_length=200)
    supplier: str = Field(..., min_length=1, max_length=200)
    status: fms_models.EquipmentStatus = fms_models.EquipmentStatus.ACTIVE
    purchase_date: date
    warranty_expiry: date
    department_id: Optional[int] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("unit_price", "vat", mode="before")
    @classmethod
    def quantize_amounts(cls, value):
        return normalize_decimal(value)


class EquipmentCreate(EquipmentBase):
    pass


class EquipmentUpdate(CamelSchema):
    """Partial update; only the fields present in the request body are applied."""
    equipment_id: Optional[str] = Field(None, min_length=1, max_length=50)
    equipment_name: Optional[str] = Field(None, min_length=1, max_length=200)
    equipment_type: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    serial_number: Optional[str] = Field(None, min_length=1, max_length=100)
    country_of_origin: Optional[str] = Field(None, min_length=1, max_length=100)
    manufacturer: Optional[str] = Field(None, min_length=1, max_length=200)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    vat: Optional[Decimal] = Field(None, ge=0, le=100, max_digits=5, decimal_places=2)
    funding_source: Optional[str] = Field(None, min_length=1, max_length=200)
    supplier: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[fms_models.EquipmentStatus] = None
    purchase_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    department_id: Optional[int] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("unit_price", "vat", mode="before")
    @classmethod
    def quantize_amounts(cls, value):
        return normalize_decimal(value)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        # only departmentId may be cleared; every other column is NOT NULL
        nulled = sorted(
            name for name in self.model_fields_set
            if name not in NULLABLE_UPDATE_FIELDS and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(to_camel(name) for name in nulled)}")
        return self


class EquipmentRead(EquipmentBase):
    id: int


# =============================================================================
# 2. Maintenance schemas
# =============================================================================
class MaintenanceCreate(CamelSchema):
    """
    Maintenance request body. `performedBy` defaults to the requesting user;
    `reason` (sent by the request form) is folded into `notes`.
    """
    equipment_id: Optional[int] = None
    start_date: datetime
    end_date: datetime
    maintenance_type: str = Field(..., min_length=1, max_length=50)
    performed_by: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    reason: Optional[str] = Field(None, exclude=True)
    status: str = Field(default="Pending", min_length=1, max_length=30)

    @model_validator(mode="after")
    def fold_reason_into_notes(self):
        if self.reason:
            reason = self.reason.strip()
            self.notes = f"{reason}\n{self.notes}" if self.notes else reason
            self.reason = None
        same_kind = (self.start_date.tzinfo is None) == (self.end_date.tzinfo is None)
        if same_kind and self.end_date < self.start_date:
            raise ValueError("endDate must not be earlier than startDate")
        return self


class MaintenanceRead(CamelSchema):
    id: int
    equipment_id: Optional[int] = None
    start_date: datetime
    end_date: datetime
    maintenance_type: str
    performed_by: str
    notes: Optional[str] = None
    status: str
