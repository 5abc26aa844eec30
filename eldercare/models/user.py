# =====================================================================
# MODELO DE USUARIOS
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, DateTime, func
from datetime import datetime
from typing import Optional

from .base import Base

class User(Base):
    """
    Usuario del sistema (personal de la residencia).
    El rol 'admin' habilita las operaciones de borrado.
    """
    __tablename__ = "users"
    # Valores por defecto del servidor leídos tras INSERT/UPDATE (RETURNING)
    __mapper_args__ = {"eager_defaults": True}

    # ---------- Identificación ----------
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    # ---------- Datos de autenticación ----------
    # Hash bcrypt
    password: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), server_default='staff', nullable=False)

    # ---------- Auditoría ----------
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        """Verifica si el usuario tiene rol de administrador."""
        return self.role == "admin"
