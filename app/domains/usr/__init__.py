# app/domains/usr/__init__.py

"""
The 'usr' domain package: departments, users and authentication.

Submodules:
- `models.py`: SQLModel tables `departments` and `users`, and `UserRole`.
- `schemas.py`: request/response DTOs (login, user projection, password reset).
- `crud.py`: SQL CRUD objects used by `DatabaseStorage`.
- `routers.py`: `/auth/*`, `/departments`, `/users` endpoints.
"""

__all__ = []
