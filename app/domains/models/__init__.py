# app/domains/models/__init__.py

"""
Central import point for every SQLModel table so that SQLModel.metadata
knows all tables before create_all() runs.
"""

# usr (User, Department)
from app.domains.usr.models import User, UserRole, Department

# fms (Equipment, Maintenance)
from app.domains.fms.models import Equipment, EquipmentStatus, Maintenance

__all__ = ["User", "UserRole", "Department", "Equipment", "EquipmentStatus", "Maintenance"]
