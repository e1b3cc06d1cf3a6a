# app/domains/shared/__init__.py

"""
The 'shared' domain package.

- `schemas.py`: the camelCase base schema and the generic response bodies.
- `routers.py`: import template downloads.
"""

__all__ = []
