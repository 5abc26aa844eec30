# =====================================================================
# ESQUEMAS DE CAMAS
# =====================================================================

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from .enums import BedStatus

# =========================================================
# ESQUEMAS DE CAMAS
# =========================================================

class BedCreate(BaseModel):
    """
    Creación de una cama.

    Attributes:
        bed_number (str): Número de cama dentro de la habitación
        building (Optional[str]): Edificio
        floor (Optional[str]): Piso
        room_number (Optional[str]): Habitación
        status (BedStatus): 'available' o 'maintenance' (default: 'available')
        description (Optional[str]): Notas libres
    """
    bed_number: str = Field(..., min_length=1, max_length=20)
    building: Optional[str] = None
    floor: Optional[str] = None
    room_number: Optional[str] = None
    status: BedStatus = "available"
    description: Optional[str] = None


class BedUpdate(BaseModel):
    """Actualización parcial; los campos omitidos conservan su valor."""
    bed_number: Optional[str] = Field(None, min_length=1, max_length=20)
    building: Optional[str] = None
    floor: Optional[str] = None
    room_number: Optional[str] = None
    status: Optional[BedStatus] = None
    description: Optional[str] = None


class BedAssign(BaseModel):
    """
    Asignación de un miembro a una cama.

    Attributes:
        member_id (int): ID del miembro
        bed_id (int): ID de la cama destino
    """
    member_id: Optional[int] = None
    bed_id: Optional[int] = None


class BedStatistics(BaseModel):
    total: int
    occupied: int
    available: int
    maintenance: int
    occupancyRate: float
