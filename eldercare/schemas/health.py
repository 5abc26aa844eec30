# =====================================================================
# ESQUEMAS DE SALUD
# =====================================================================

from __future__ import annotations

from typing import Any, List, Optional
from pydantic import BaseModel, Field

from .enums import Severity, DEFAULT_SEVERITY


class Condition(BaseModel):
    """
    Registro normalizado de un problema de salud.

    Attributes:
        id (str): Identificador estable una vez asignado
        name (str): Nombre de la condición (texto libre)
        severity (Severity): mild, moderate o severe (default: moderate)
    """
    id: str
    name: str
    severity: Severity = DEFAULT_SEVERITY


class HealthMonitorUpdate(BaseModel):
    """
    Alta de datos de salud de un miembro.

    ``health_conditions`` y ``health_status`` aceptan cualquier forma
    soportada por el normalizador; ``health_conditions`` tiene prioridad.
    """
    member_id: Optional[int] = None
    health_conditions: Optional[Any] = None
    health_status: Optional[Any] = None
    responsibility_worker: Optional[str] = None
    health_detail: Optional[str] = None


class HealthMonitorResult(BaseModel):
    member_id: int
    member_updated: bool
    health_conditions: List[Condition] = Field(default_factory=list)
    health_status_text: str
