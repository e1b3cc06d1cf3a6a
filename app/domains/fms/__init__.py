# app/domains/fms/__init__.py

"""
The 'fms' domain package: medical equipment and its maintenance records.

Submodules:
- `models.py`: SQLModel tables `equipment` and `maintenance`, and `EquipmentStatus`.
- `schemas.py`: request/response DTOs (decimal normalization, maintenance request).
- `crud.py`: SQL CRUD objects used by `DatabaseStorage`.
- `routers.py`: `/equipment` and `/maintenance` endpoints.
"""

__all__ = []
