# app/services/import_service.py

"""
Bulk import of equipment and users from decoded spreadsheet rows.

Every row is validated on its own: a rejected row is recorded in the summary
and the import moves on to the next one. Nothing is rolled back, so the
result can be a partial success ("90 of 100 rows imported").
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as SchemaValidationError

from app.core.exceptions import StorageError
from app.core.storage import Storage
from app.domains.fms import schemas as fms_schemas
from app.domains.usr import schemas as usr_schemas
from app.domains.shared.schemas import ImportResult, ImportRowError

logger = logging.getLogger(__name__)

# (snake_case, camelCase) header spellings; snake_case is checked first
EQUIPMENT_COLUMNS: List[Tuple[str, str]] = [
    ("equipment_id", "equipmentId"),
    ("equipment_name", "equipmentName"),
    ("equipment_type", "equipmentType"),
    ("model", "model"),
    ("serial_number", "serialNumber"),
    ("country_of_origin", "countryOfOrigin"),
    ("manufacturer", "manufacturer"),
    ("unit_price", "unitPrice"),
    ("vat", "vat"),
    ("funding_source", "fundingSource"),
    ("supplier", "supplier"),
    ("status", "status"),
    ("purchase_date", "purchaseDate"),
    ("warranty_expiry", "warrantyExpiry"),
    ("department_id", "departmentId"),
]

USER_COLUMNS: List[Tuple[str, str]] = [
    ("username", "username"),
    ("password", "password"),
    ("full_name", "fullName"),
    ("role", "role"),
    ("department_id", "departmentId"),
]

DATE_FIELDS = ("purchase_date", "warranty_expiry")


class RowRejected(Exception):
    """A single import row cannot be imported."""

    def __init__(self, error: str, details: Optional[List[Dict[str, Any]]] = None):
        self.error = error
        self.details = details
        super().__init__(error)


# =============================================================================
# cell parsing helpers
# =============================================================================
def pick_columns(row: Dict[str, Any], columns: List[Tuple[str, str]]) -> Dict[str, str]:
    """
    Map a raw row onto snake_case field names, trimming every value.
    Blank cells are left out so that schema defaults apply.
    """
    data = {}
    for snake, camel in columns:
        value = row.get(snake)
        if value is None or str(value).strip() == "":
            value = row.get(camel)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            data[snake] = text
    return data


def parse_decimal(value: str, label: str) -> Decimal:
    try:
        number = Decimal(value.replace(",", ""))
    except InvalidOperation:
        raise RowRejected(f"Invalid {label}: '{value}' is not a number")
    if not number.is_finite():
        raise RowRejected(f"Invalid {label}: '{value}' is not a number")
    return number


def parse_int(value: str, label: str) -> int:
    number = parse_decimal(value, label)
    if number != number.to_integral_value():
        raise RowRejected(f"Invalid {label}: '{value}' is not a whole number")
    return int(number)


def parse_date_text(value: str) -> str:
    # spreadsheet dates arrive as "YYYY-MM-DD HH:MM:SS"
    if len(value) > 10 and value[10] in (" ", "T"):
        return value[:10]
    return value


def schema_details(e: SchemaValidationError) -> List[Dict[str, Any]]:
    return e.errors(include_url=False, include_context=False)


# =============================================================================
# import service
# =============================================================================
class ImportService:
    """Validates and persists import rows through the injected storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def _run(self, kind: str, rows: List[Dict[str, Any]], handler) -> ImportResult:
        imported = 0
        errors: List[ImportRowError] = []

        for row_number, row in enumerate(rows, start=1):
            try:
                await handler(row)
                imported += 1
            except RowRejected as e:
                errors.append(ImportRowError(row=row_number, data=row, error=e.error, details=e.details))
            except StorageError as e:
                errors.append(ImportRowError(row=row_number, data=row, error=str(e)))

        logger.info(f"{kind} import finished: {imported} imported, {len(errors)} failed, {len(rows)} total")
        return ImportResult(
            success=True,
            imported=imported,
            total=len(rows),
            failed=len(errors),
            errors=errors or None,
        )

    # --- equipment ---
    async def import_equipment(self, rows: List[Dict[str, Any]]) -> ImportResult:
        return await self._run("Equipment", rows, self._import_equipment_row)

    async def _import_equipment_row(self, row: Dict[str, Any]) -> None:
        data: Dict[str, Any] = pick_columns(row, EQUIPMENT_COLUMNS)

        if "unit_price" in data:
            data["unit_price"] = parse_decimal(data["unit_price"], "unit price")
        if "vat" in data:
            vat = parse_decimal(data["vat"], "VAT")
            if vat < 0 or vat > 100:
                raise RowRejected(f"VAT must be between 0 and 100 (got {data['vat']})")
            data["vat"] = vat
        if "department_id" in data:
            data["department_id"] = parse_int(data["department_id"], "department id")
        for field in DATE_FIELDS:
            if field in data:
                data[field] = parse_date_text(data[field])

        try:
            equipment_in = fms_schemas.EquipmentCreate.model_validate(data)
        except SchemaValidationError as e:
            raise RowRejected("Validation failed", details=schema_details(e))

        if await self.storage.get_equipment_by_code(equipment_in.equipment_id):
            raise RowRejected(f"Equipment ID '{equipment_in.equipment_id}' already exists")

        await self.storage.create_equipment(equipment_in)

    # --- users ---
    async def import_users(self, rows: List[Dict[str, Any]]) -> ImportResult:
        return await self._run("User", rows, self._import_user_row)

    async def _import_user_row(self, row: Dict[str, Any]) -> None:
        data: Dict[str, Any] = pick_columns(row, USER_COLUMNS)

        if "role" in data:
            data["role"] = data["role"].lower()
        if "department_id" in data:
            department_id = parse_int(data["department_id"], "department id")
            if not await self.storage.get_department(department_id):
                raise RowRejected(f"Department {department_id} does not exist")
            data["department_id"] = department_id

        try:
            user_in = usr_schemas.UserCreate.model_validate(data)
        except SchemaValidationError as e:
            raise RowRejected("Validation failed", details=schema_details(e))

        if await self.storage.get_user_by_username(user_in.username):
            raise RowRejected(f"Username '{user_in.username}' already exists")

        await self.storage.create_user(user_in)
