from __future__ import annotations

from fastapi import Depends, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import jwt
import logging

from eldercare.db import AsyncSessionLocal
from eldercare.exceptions import UnauthorizedError, ForbiddenError
from eldercare.models import User
from eldercare.schemas.pagination import PaginationParams
from eldercare.security import decode_token

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

async def get_db() -> AsyncSession:
    """
    Sesión por petición. Se cierra (y devuelve la conexión al pool)
    en cualquier salida, incluidas las excepciones.
    """
    async with AsyncSessionLocal() as session:
        yield session

async def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise UnauthorizedError()
    try:
        payload = decode_token(creds.credentials)
        return {"id": payload["id"], "username": payload.get("username"), "role": payload.get("role")}
    except (jwt.PyJWTError, KeyError) as e:
        logger.warning(f"Invalid token: {e}")
        raise UnauthorizedError()

async def require_admin(
    current: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Exige rol 'admin'. El rol se vuelve a leer de la base de datos
    para que un cambio de rol surta efecto sin esperar a que caduque el token.
    """
    user = await db.get(User, current["id"])
    if user is None:
        raise UnauthorizedError("User no longer exists")
    if not user.is_admin:
        raise ForbiddenError()
    return {**current, "role": user.role}

def get_pagination(
    page: int = Query(1, ge=1, description="Número de página"),
    limit: int = Query(10, ge=1, le=100, description="Tamaño de página"),
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)
