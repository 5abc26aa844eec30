# =====================================================================
# MODELO DE CAMAS
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, DateTime, func
from datetime import datetime
from typing import Optional

from .base import Base, bed_status_enum

class Bed(Base):
    """
    Modelo de Cama.
    Una cama tiene una ubicación (edificio, piso, habitación, número) y
    como mucho un ocupante (current_member_id).
    Invariante: status == 'occupied' si y solo si current_member_id no es NULL.
    """
    __tablename__ = "beds"
    # Valores por defecto del servidor leídos tras INSERT/UPDATE (RETURNING)
    __mapper_args__ = {"eager_defaults": True}

    # ---------- Identificación ----------
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bed_number: Mapped[str] = mapped_column(String(20), nullable=False)

    # ---------- Ubicación ----------
    building: Mapped[Optional[str]] = mapped_column(String(50))
    floor: Mapped[Optional[str]] = mapped_column(String(20))
    room_number: Mapped[Optional[str]] = mapped_column(String(20))

    # ---------- Estado y ocupante ----------
    status: Mapped[str] = mapped_column(
        bed_status_enum,
        server_default='available',
        nullable=False
    )
    # Sin FK: la relación recíproca la mantiene AssignmentService
    current_member_id: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # ---------- Auditoría ----------
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """Representación en string de la cama."""
        return f"<Bed(id={self.id}, number={self.bed_number}, status={self.status})>"

    @property
    def location_label(self) -> str:
        """Ubicación completa: edificio-piso-habitación-cama."""
        return f"{self.building or ''}-{self.floor or ''}-{self.room_number or ''}-{self.bed_number}"
