# flake8: noqa
# scripts/export_data.py

import asyncio
import json
from pathlib import Path
from typing import Any, Dict

import typer

from app.core.database import AsyncSessionLocal, engine
from app.core.storage import DatabaseStorage, Storage
from app.domains.fms import schemas as fms_schemas
from app.domains.usr import schemas as usr_schemas

cli = typer.Typer()

MASKED_PASSWORD = "***MASKED***"


async def collect_master_data(storage: Storage) -> Dict[str, Any]:
    """Every table as camelCase JSON-ready dicts; passwords are masked."""
    departments = await storage.list_departments()
    equipment = await storage.list_equipment()
    maintenance = await storage.list_maintenance()
    users = await storage.list_users()

    def dump(schema, obj):
        return schema.model_validate(obj).model_dump(mode="json", by_alias=True)

    return {
        "departments": [dump(usr_schemas.DepartmentRead, d) for d in departments],
        "equipment": [dump(fms_schemas.EquipmentRead, e) for e in equipment],
        "maintenance": [dump(fms_schemas.MaintenanceRead, m) for m in maintenance],
        "users": [{**dump(usr_schemas.UserRead, u), "password": MASKED_PASSWORD} for u in users],
    }


async def export_master_data(output: Path) -> Dict[str, Any]:
    try:
        async with AsyncSessionLocal() as db:
            data = await collect_master_data(DatabaseStorage(db))
    finally:
        await engine.dispose()

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return data


@cli.command()
def main(
    output: Path = typer.Option(
        Path("exports") / "equipment_master_data.json", '--output', '-o',
        help="Destination JSON file."
    ),
):
    """
    Export departments, equipment, maintenance records and users to JSON.
    """
    data = asyncio.run(export_master_data(output))
    counts = ", ".join(f"{len(rows)} {name}" for name, rows in data.items())
    typer.echo(f"Data exported successfully to {output} ({counts})")


if __name__ == "__main__":
    cli()
