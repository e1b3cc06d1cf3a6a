# app/utils/files.py

"""
Spreadsheet and CSV helpers for the import endpoints.

- `read_upload_rows`: validates an uploaded file and decodes it into rows.
- `build_*_template`: sample import files (header row plus one example row).

Decoding and encoding are done with pandas; `.xlsx` goes through openpyxl.
"""

from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import ValidationError

CSV_CONTENT_TYPES = {"text/csv", "application/csv"}
EXCEL_CONTENT_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}

CSV_EXTENSIONS = {".csv"}
EXCEL_EXTENSIONS = {".xlsx", ".xls"}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"

EQUIPMENT_TEMPLATE_ROW = {
    "equipment_id": "EQ-0001",
    "equipment_name": "Patient Monitor",
    "equipment_type": "Monitoring",
    "model": "PM-9000",
    "serial_number": "SN123456",
    "country_of_origin": "Germany",
    "manufacturer": "MedTech GmbH",
    "unit_price": "15000.00",
    "vat": "15.00",
    "funding_source": "Government",
    "supplier": "Health Supplies Ltd",
    "status": "Active",
    "purchase_date": "2024-01-15",
    "warranty_expiry": "2027-01-15",
    "department_id": "1",
}

USER_TEMPLATE_ROW = {
    "username": "jdoe",
    "password": "changeme",
    "full_name": "John Doe",
    "role": "user",
    "department_id": "1",
}


# =============================================================================
# 1. upload decoding
# =============================================================================
def detect_file_kind(filename: Optional[str], content_type: Optional[str]) -> str:
    """
    Return "csv" or "excel" for an accepted upload, raise ValidationError
    otherwise. The extension decides between CSV and Excel when it is known,
    since browsers often label CSV files as application/vnd.ms-excel.
    """
    content_type = (content_type or "").split(";")[0].strip().lower()
    extension = Path(filename or "").suffix.lower()

    if content_type not in CSV_CONTENT_TYPES | EXCEL_CONTENT_TYPES | GENERIC_CONTENT_TYPES:
        raise ValidationError("Only Excel or CSV files are allowed")

    if extension in CSV_EXTENSIONS:
        return "csv"
    if extension in EXCEL_EXTENSIONS:
        return "excel"
    if content_type in CSV_CONTENT_TYPES:
        return "csv"
    if content_type in EXCEL_CONTENT_TYPES:
        return "excel"
    raise ValidationError("Only Excel or CSV files are allowed")


def _cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value)


def decode_rows(content: bytes, kind: str) -> List[Dict[str, str]]:
    """Decode file bytes into header-keyed rows of text; fully blank rows are dropped."""
    try:
        if kind == "csv":
            frame = pd.read_csv(BytesIO(content), dtype=str, keep_default_na=False, encoding="utf-8-sig")
        else:
            frame = pd.read_excel(BytesIO(content), dtype=str, keep_default_na=False, engine="openpyxl")
    except Exception as e:
        raise ValidationError("Could not read the uploaded file") from e

    frame.columns = [str(column).strip() for column in frame.columns]
    rows = []
    for record in frame.to_dict(orient="records"):
        row = {key: _cell_to_text(value) for key, value in record.items()}
        if any(value.strip() for value in row.values()):
            rows.append(row)
    return rows


async def read_upload_rows(upload: Optional[UploadFile]) -> List[Dict[str, str]]:
    """Validate an uploaded import file and return its data rows."""
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")

    kind = detect_file_kind(upload.filename, upload.content_type)
    content = await upload.read()
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > settings.MAX_IMPORT_FILE_SIZE_MB * 1024 * 1024:
        raise ValidationError(f"File exceeds {settings.MAX_IMPORT_FILE_SIZE_MB} MB")
    return decode_rows(content, kind)


# =============================================================================
# 2. templates
# =============================================================================
def _to_xlsx(frame: pd.DataFrame, sheet_name: str) -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


def _to_csv(frame: pd.DataFrame) -> bytes:
    return frame.to_csv(index=False).encode("utf-8")


def build_equipment_template(fmt: str) -> bytes:
    frame = pd.DataFrame([EQUIPMENT_TEMPLATE_ROW])
    return _to_xlsx(frame, "Equipment") if fmt == "xlsx" else _to_csv(frame)


def build_user_template(fmt: str) -> bytes:
    frame = pd.DataFrame([USER_TEMPLATE_ROW])
    return _to_xlsx(frame, "Users") if fmt == "xlsx" else _to_csv(frame)
