# app/__init__.py

"""
Main package of the hospital equipment tracker FastAPI application.

The package is split into a `core` subpackage (settings, database, sessions,
security, storage) and a `domains` subpackage holding one package per business
area (`usr` for users/departments, `fms` for equipment/maintenance, `shared`
for cross-cutting schemas and template downloads).
"""

APP_NAME = "Hospital Equipment Tracker API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api"  # common prefix for API routes (applied in main.py)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Hospital medical-equipment inventory and maintenance tracker API backend."
__all__ = []
