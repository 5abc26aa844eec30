# =====================================================================
# ESQUEMAS DE MIEMBROS
# =====================================================================

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field

# =========================================================
# ESQUEMAS DE MIEMBROS
# =========================================================

"""
gender, care_level y status aceptan el código ('male', 'self-care', ...)
o la etiqueta mostrada al usuario ('男', '自理', ...). La conversión
a código se hace con las tablas de eldercare.schemas.enums.
"""


class MemberCreate(BaseModel):
    """
    Alta de un miembro.

    Attributes:
        name (str): Nombre completo
        age (int): Edad
        gender (Optional[str]): Código o etiqueta (default: 'male')
        care_level (Optional[str]): Código o etiqueta (default: 'self-care')
        status (Optional[str]): Código o etiqueta (default: 'active')
        responsibility_worker (Optional[str]): Cuidador responsable
        caregiver (Optional[str]): Alias de responsibility_worker usado por el front-end
        health_conditions (Any): Condiciones de salud en cualquier forma soportada
        health_status (Any): Forma alternativa de las condiciones
        health_notes (Optional[str]): Nota de salud usada si no hay condiciones
        health_detail (Optional[str]): Detalle libre de salud
    """
    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=0, le=150)
    gender: Optional[str] = None
    id_card: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    care_level: Optional[str] = None
    status: Optional[str] = None
    responsibility_worker: Optional[str] = None
    caregiver: Optional[str] = None
    health_conditions: Optional[Any] = None
    health_status: Optional[Any] = None
    health_notes: Optional[str] = None
    health_detail: Optional[str] = None


class MemberUpdate(BaseModel):
    """
    Actualización parcial de un miembro.
    La cama no se cambia aquí: usar /beds/assign y /beds/{id}/unassign.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[str] = None
    id_card: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    care_level: Optional[str] = None
    status: Optional[str] = None
    responsibility_worker: Optional[str] = None
    caregiver: Optional[str] = None
    health_conditions: Optional[Any] = None
    health_status: Optional[Any] = None
    health_notes: Optional[str] = None
    health_detail: Optional[str] = None
