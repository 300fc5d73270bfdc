"""Password hashing, signed session tokens and the current-user dependency."""

import hashlib
import hmac
import logging
import time

import bcrypt
from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings
from backend.database import get_session
from backend.models.user import User

logger = logging.getLogger(__name__)

COOKIE_NAME = "recallio_session"

# bcrypt ignores input past 72 bytes; newer releases reject it outright
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode())
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _sign(payload: str) -> str:
    return hmac.new(settings.secret_key.encode(), payload.encode(), hashlib.sha256).hexdigest()


def create_session_token(user_id: int, now: float | None = None) -> str:
    """Return a signed ``expires.user_id.signature`` token."""
    now = time.time() if now is None else now
    expires = int(now) + settings.session_expiry_days * 86400
    payload = f"{expires}.{user_id}"
    return f"{payload}.{_sign(payload)}"


def verify_session_token(token: str, now: float | None = None) -> int | None:
    """Return the user id for a valid, unexpired token, otherwise None."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    expires, user_id, signature = parts
    if not hmac.compare_digest(signature, _sign(f"{expires}.{user_id}")):
        return None
    if not (expires.isdigit() and user_id.isdigit()):
        return None
    now = time.time() if now is None else now
    if now >= int(expires):
        return None
    return int(user_id)


def set_session_cookie(response: Response, user_id: int) -> str:
    token = create_session_token(user_id)
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=settings.session_expiry_days * 86400,
        httponly=True,
        samesite="lax",
    )
    return token


def _request_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.cookies.get(COOKIE_NAME)


async def current_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the signed-in user or raise 401."""
    token = _request_token(request)
    user_id = verify_session_token(token) if token else None
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
