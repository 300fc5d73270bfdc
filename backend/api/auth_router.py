"""API routes for account signup and sign-in."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import LoginRequest, LoginResponse, SignupRequest, UserResponse
from backend.auth import (
    COOKIE_NAME,
    current_user,
    hash_password,
    set_session_cookie,
    verify_password,
)
from backend.database import get_session
from backend.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=201)
async def signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_session),
) -> User:
    """Create a new account."""
    email = request.email.strip().lower()
    existing = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    user = User(email=email, name=request.name, password_hash=hash_password(request.password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %d", user.id)
    return user


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """Check credentials and start a signed session."""
    email = request.email.strip().lower()
    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if user is None or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = set_session_cookie(response, user.id)
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
async def logout(response: Response) -> dict:
    response.delete_cookie(COOKIE_NAME)
    return {"success": True}


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(current_user)) -> User:
    return user
