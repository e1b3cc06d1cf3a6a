# app/core/__init__.py

"""
Core components shared by every domain.

- `config.py`: settings (pydantic-settings).
- `database.py`: async engine and sessions for the SQL backend.
- `storage.py`: the storage interface and its memory/database implementations.
- `sessions.py`: server-side login sessions.
- `security.py`: password hashing and credential checks.
- `dependencies.py`: FastAPI dependencies (current user, role and department guards).
- `exceptions.py`, `logging_config.py`: error types and logging setup.
"""

__all__ = []
