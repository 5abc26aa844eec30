# =====================================================================
# REGISTRO DE LLAMADAS A LA API
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, DateTime, func
from datetime import datetime
from typing import Optional

from .base import Base

class ApiLog(Base):
    """Una fila por petición HTTP atendida (best-effort, ver middlewares)."""
    __tablename__ = "api_logs"
    # Valores por defecto del servidor leídos tras INSERT/UPDATE (RETURNING)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    endpoint: Mapped[str] = mapped_column(String(255), nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    request_body: Mapped[Optional[str]] = mapped_column(Text)
    response_code: Mapped[int] = mapped_column(Integer, nullable=False)
    # Milisegundos
    response_time: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
