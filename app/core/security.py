# app/core/security.py

"""
Password hashing and credential checks.

The request guards that use these (current user, role checks, department
scoping) live in `app.core.dependencies`.
"""

import logging
from typing import Optional, TYPE_CHECKING

from passlib.context import CryptContext

if TYPE_CHECKING:
    from app.core.storage import Storage
    from app.domains.usr.models import User

logger = logging.getLogger(__name__)

# pbkdf2_sha256 is implemented by passlib itself, no native backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plaintext password with a stored hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # hash not recognized by the context
        logger.warning("Stored password hash has an unknown format")
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


async def authenticate_user(storage: "Storage", username: str, password: str) -> Optional["User"]:
    """
    Look the user up by username and check the password.
    Returns None for an unknown username and for a wrong password alike.
    """
    user = await storage.get_user_by_username(username)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
