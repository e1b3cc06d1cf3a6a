# app/utils/__init__.py

"""
Utilities that do not belong to a single domain.

- `files.py`: import file decoding and template generation.
"""

# flake8: noqa
from . import files

__all__ = ["files"]
