# app/domains/usr/routers.py

"""
API endpoints of the 'usr' domain: authentication, departments and users.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status

from app.core.config import settings
from app.core import dependencies as deps
from app.core.exceptions import NotFoundError
from app.core.security import authenticate_user
from app.core.sessions import SessionStore
from app.core.storage import Storage
from app.services.import_service import ImportService
from app.utils.files import read_upload_rows
from app.domains.shared import schemas as shared_schemas

from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["User & Department Management"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. authentication
# =============================================================================
@router.post("/auth/login", response_model=usr_schemas.UserRead, summary="Log in and start a session")
async def login(
    credentials: usr_schemas.LoginRequest,
    response: Response,
    storage: Storage = Depends(deps.get_storage),
    sessions: SessionStore = Depends(deps.get_session_store),
):
    user = await authenticate_user(storage, credentials.username, credentials.password)
    if not user:
        logger.warning(f"Failed login attempt for username '{credentials.username}'")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    sid = await sessions.create(user.id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sid,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    logger.info(f"User '{user.username}' logged in")
    return user


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="Current user")
async def read_users_me(current_user: usr_models.User = Depends(deps.require_auth)):
    return current_user


@router.post("/auth/logout", response_model=shared_schemas.SuccessResponse, summary="Log out")
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(deps.get_session_store),
):
    sid = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if sid:
        await sessions.delete(sid)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return shared_schemas.SuccessResponse()


# =============================================================================
# 2. departments
# =============================================================================
@router.get("/departments", response_model=List[usr_schemas.DepartmentRead], summary="List departments")
async def read_departments(storage: Storage = Depends(deps.get_storage)):
    return await storage.list_departments()


@router.post("/departments", response_model=usr_schemas.DepartmentRead, summary="Create a department")
async def create_department(
    department_in: usr_schemas.DepartmentCreate,
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    if await storage.get_department_by_code(department_in.code):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department with this code already exists")
    return await storage.create_department(department_in)


# =============================================================================
# 3. users
# =============================================================================
@router.get("/users", response_model=List[usr_schemas.UserRead], summary="List users")
async def read_users(
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    return await storage.list_users()


@router.post("/users", response_model=usr_schemas.UserRead, summary="Create a user")
async def create_user(
    user_in: usr_schemas.UserCreate,
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    if await storage.get_user_by_username(user_in.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    if user_in.department_id is not None and not await storage.get_department(user_in.department_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department not found")
    return await storage.create_user(user_in)


@router.post("/users/import", response_model=shared_schemas.ImportResult, response_model_exclude_none=True, summary="Import users from a file")
async def import_users(
    file: Optional[UploadFile] = File(None),
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    rows = await read_upload_rows(file)
    return await ImportService(storage).import_users(rows)


@router.post("/users/{user_id}/reset-password", response_model=shared_schemas.SuccessResponse, summary="Reset a user's password")
async def reset_password(
    user_id: int,
    reset_in: usr_schemas.PasswordReset,
    storage: Storage = Depends(deps.get_storage),
    current_admin_user: usr_models.User = Depends(deps.require_admin_or_manager),
):
    try:
        await storage.update_user(user_id, usr_schemas.UserUpdate(password=reset_in.new_password))
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info(f"Password of user {user_id} reset by '{current_admin_user.username}'")
    return shared_schemas.SuccessResponse()
