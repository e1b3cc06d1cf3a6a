# app/domains/shared/routers.py

"""
Downloadable sample files for the equipment and user imports.
Mounted at the application root, not under the API prefix.
"""

from fastapi import APIRouter, Response

from app.utils.files import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    build_equipment_template,
    build_user_template,
)

router = APIRouter(tags=["Import Templates"])


def _download(content: bytes, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/template.xlsx", summary="Equipment import template (Excel)")
async def equipment_template_xlsx():
    return _download(build_equipment_template("xlsx"), "equipment_template.xlsx", XLSX_MEDIA_TYPE)


@router.get("/template.csv", summary="Equipment import template (CSV)")
async def equipment_template_csv():
    return _download(build_equipment_template("csv"), "equipment_template.csv", CSV_MEDIA_TYPE)


@router.get("/user-template.xlsx", summary="User import template (Excel)")
async def user_template_xlsx():
    return _download(build_user_template("xlsx"), "user_template.xlsx", XLSX_MEDIA_TYPE)


@router.get("/user-template.csv", summary="User import template (CSV)")
async def user_template_csv():
    return _download(build_user_template("csv"), "user_template.csv", CSV_MEDIA_TYPE)
