# app/domains/shared/schemas.py

"""
Schemas shared by every domain: the camelCase wire base class and the
generic response bodies (success flag, import summary).
"""

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field


class CamelSchema(SQLModel):
    """
    Base class of every API DTO. Attributes are snake_case in Python and
    camelCase on the wire; input accepts either spelling.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelSchema):
    success: bool = True


# =============================================================================
# import summary
# =============================================================================
class ImportRowError(CamelSchema):
    """One rejected row of an import file."""
    row: int = Field(..., description="1-based data row number (header excluded)")
    data: Dict[str, Any] = Field(default_factory=dict, description="Raw row as read from the file")
    error: str = Field(..., description="Human readable reason")
    details: Optional[List[Dict[str, Any]]] = Field(default=None, description="Schema error list, when the row failed validation")


class ImportResult(CamelSchema):
    success: bool = True
    imported: int = 0
    total: int = 0
    failed: int = 0
    errors: Optional[List[ImportRowError]] = None
