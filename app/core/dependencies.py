# app/core/dependencies.py

"""
FastAPI dependencies shared by the routers.

- storage injection (`get_storage`, re-exported from `app.core.storage`).
- current user resolution from the session cookie.
- role based guards and the department (row level) access rule.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from app.core.config import settings
from app.core.sessions import SessionStore, get_session_store
from app.core.storage import Storage, get_storage
from app.domains.usr import models as usr_models

__all__ = [
    "get_storage",
    "get_session_store",
    "get_current_user_optional",
    "get_current_active_user",
    "get_current_admin_user",
    "require_auth",
    "require_admin_or_manager",
    "ensure_department_access",
    "can_access_department",
    "department_scope",
    "is_elevated",
]


async def get_current_user_optional(
    request: Request,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> Optional[usr_models.User]:
    """
    Resolve cookie -> session -> user. Any miss (no cookie, unknown or
    expired session, deleted user) leaves the request anonymous.
    """
    sid = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not sid:
        return None
    user_id = await sessions.get(sid)
    if user_id is None:
        return None
    return await storage.get_user(user_id)


async def get_current_active_user(
    current_user: Optional[usr_models.User] = Depends(get_current_user_optional),
) -> usr_models.User:
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return current_user


async def get_current_admin_user(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """Admin or manager only."""
    if not is_elevated(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return current_user


require_auth = get_current_active_user
require_admin_or_manager = get_current_admin_user


# =============================================================================
# department (row level) access
# =============================================================================
def is_elevated(user: usr_models.User) -> bool:
    return usr_models.UserRole(user.role).is_elevated


def can_access_department(user: usr_models.User, department_id: Optional[int]) -> bool:
    if is_elevated(user):
        return True
    # a user without a department sees nothing
    return user.department_id is not None and department_id == user.department_id


def ensure_department_access(user: usr_models.User, department_id: Optional[int]) -> None:
    """Raise 403 when a department-scoped user reaches into another department."""
    if not can_access_department(user, department_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to this department")


def department_scope(user: usr_models.User, requested: Optional[int] = None) -> Optional[int]:
    """
    Department filter to apply to a list query. Admins and managers get what
    they asked for; everyone else is narrowed to their own department.
    """
    if is_elevated(user):
        return requested
    return user.department_id
