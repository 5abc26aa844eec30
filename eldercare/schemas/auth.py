# =====================================================================
# ESQUEMAS DE AUTENTICACIÓN
# =====================================================================

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """
    Solicitud de registro.

    Attributes:
        username (str): Nombre de usuario único
        password (str): Contraseña en texto plano
        name (Optional[str]): Nombre para mostrar
        role (str): Rol del usuario (default: 'staff')
    """
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    name: Optional[str] = None
    role: str = "staff"


class LoginRequest(BaseModel):
    """
    Solicitud de inicio de sesión.

    Attributes:
        username (str): Nombre de usuario
        password (str): Contraseña en texto plano
    """
    username: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str] = None
    role: str


class LoginData(BaseModel):
    """Token JWT de acceso y datos del usuario."""
    token: str
    user: UserOut
