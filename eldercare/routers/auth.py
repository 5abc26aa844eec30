# eldercare/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eldercare.db import atomic
from eldercare.deps import get_db
from eldercare.exceptions import UnauthorizedError, UsernameTaken
from eldercare.models import User
from eldercare.schemas import RegisterRequest, LoginRequest, UserOut, LoginData, envelope
from eldercare.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=201)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    existing = await db.scalar(select(User.id).where(User.username == data.username))
    if existing is not None:
        raise UsernameTaken()

    user = User(
        username=data.username,
        password=hash_password(data.password),
        name=data.name,
        role=data.role,
    )
    async with atomic(db):
        db.add(user)
        await db.flush()

    logger.info("User registered", extra={"user_id": user.id, "role": user.role})
    return envelope(201, UserOut.model_validate(user).model_dump(), "Registered")

@router.post("/login")
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await db.scalar(select(User).where(User.username == data.username))

    if not user or not verify_password(data.password, user.password):
        raise UnauthorizedError("Invalid username or password")

    token = create_access_token(user.id, user.username, user.role)
    payload = LoginData(token=token, user=UserOut.model_validate(user))
    return envelope(200, payload.model_dump(), "Logged in")
