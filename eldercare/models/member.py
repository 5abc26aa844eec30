# =====================================================================
# MODELO DE MIEMBROS (RESIDENTES)
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, ForeignKey, DateTime, func
from datetime import datetime
from typing import Optional

from .base import Base, gender_enum, care_level_enum, member_status_enum

class Member(Base):
    """
    Modelo de Miembro: persona que vive en la residencia y recibe cuidados.
    """
    __tablename__ = "members"
    # Valores por defecto del servidor leídos tras INSERT/UPDATE (RETURNING)
    __mapper_args__ = {"eager_defaults": True}

    # ---------- Identificación ----------
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ---------- Datos personales ----------
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[str] = mapped_column(gender_enum, server_default='male', nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    id_card: Mapped[Optional[str]] = mapped_column(String(30))
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    emergency_contact: Mapped[Optional[str]] = mapped_column(String(100))
    emergency_phone: Mapped[Optional[str]] = mapped_column(String(30))

    # ---------- Cuidados ----------
    care_level: Mapped[str] = mapped_column(care_level_enum, server_default='self-care', nullable=False)
    status: Mapped[str] = mapped_column(member_status_enum, server_default='active', nullable=False)
    responsibility_worker: Mapped[Optional[str]] = mapped_column(String(100))

    # ---------- Asignación de cama ----------
    bed_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("beds.id", ondelete="SET NULL"),
        index=True
    )

    # ---------- Salud ----------
    # Lista canónica de Condition serializada como JSON
    health_status: Mapped[Optional[str]] = mapped_column(Text)
    health_detail: Mapped[Optional[str]] = mapped_column(Text)

    # ---------- Auditoría ----------
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """Representación en string del miembro."""
        return f"<Member(id={self.id}, name={self.name}, status={self.status})>"
