"""
Conversión de filas a la forma que espera el front-end.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from eldercare.models import Bed, Member
from eldercare.schemas.enums import (
    GENDER_LABELS, CARE_LEVEL_LABELS, MEMBER_STATUS_LABELS, BED_STATUS_LABELS, UNASSIGNED_TEXT,
)
from eldercare.schemas.health import Condition
from eldercare.services.health_records import to_display_text

MEMBER_COLUMNS = (
    "id", "name", "gender", "age", "id_card", "phone", "emergency_contact", "emergency_phone",
    "care_level", "status", "bed_id", "responsibility_worker", "health_detail",
    "created_at", "updated_at",
)

BED_COLUMNS = (
    "id", "bed_number", "building", "floor", "room_number", "status",
    "current_member_id", "description", "created_at", "updated_at",
)


def occupancy_rate(occupied: int, total: int) -> float:
    """Porcentaje de ocupación con 2 decimales; 0.0 si no hay camas."""
    if not total:
        return 0.0
    return round(occupied / total * 100, 2)


def _columns(obj: Any, names) -> Dict[str, Any]:
    return {name: getattr(obj, name) for name in names}


def present_member(member: Member, bed: Optional[Bed], conditions: List[Condition]) -> Dict[str, Any]:
    """
    Miembro con etiquetas de presentación.

    ``bed`` es la cama unida por member.bed_id (o None). Si el miembro no
    tiene cama, los campos de ubicación se devuelven vacíos aunque la
    consulta haya traído datos.
    """
    item = _columns(member, MEMBER_COLUMNS)
    if member.bed_id is None:
        bed = None

    item.update({
        "gender": GENDER_LABELS.label(member.gender),
        "care_level": CARE_LEVEL_LABELS.label(member.care_level),
        "status": MEMBER_STATUS_LABELS.label(member.status),
        "bed_number": bed.bed_number if bed else None,
        "building": bed.building if bed else None,
        "floor": bed.floor if bed else None,
        "room_number": bed.room_number if bed else None,
        "bed_info": bed.location_label if bed else UNASSIGNED_TEXT,
        "caregiver": member.responsibility_worker or UNASSIGNED_TEXT,
        "health_conditions": [c.model_dump() for c in conditions],
        "health_status": to_display_text(conditions),
    })
    return item


def present_bed(bed: Bed, occupant: Optional[Member]) -> Dict[str, Any]:
    item = _columns(bed, BED_COLUMNS)
    item["status_label"] = BED_STATUS_LABELS.label(bed.status)
    item.update({
        "member_name": occupant.name if occupant else None,
        "gender": GENDER_LABELS.label(occupant.gender) if occupant else None,
        "age": occupant.age if occupant else None,
        "care_level": CARE_LEVEL_LABELS.label(occupant.care_level) if occupant else None,
    })
    return item
