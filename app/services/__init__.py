# app/services/__init__.py

"""
Service layer: business flows that combine several storage operations.

- `import_service.py`: spreadsheet/CSV bulk import of equipment and users.
"""

__all__ = []
