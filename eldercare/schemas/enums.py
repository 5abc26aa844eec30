# =====================================================================
# ENUMERACIONES DEL SISTEMA Y ETIQUETAS DE PRESENTACIÓN
# =====================================================================

from __future__ import annotations

from typing import Dict, Literal, Mapping, Optional

# =========================================================
# ENUMERACIONES PRINCIPALES
# =========================================================

"""
Deben coincidir con las definiciones en eldercare.models.base.
"""

BedStatus = Literal["available", "occupied", "maintenance"]

Severity = Literal["mild", "moderate", "severe"]

SEVERITIES = ("mild", "moderate", "severe")
DEFAULT_SEVERITY: Severity = "moderate"

# =========================================================
# TABLAS DE ETIQUETAS (código <-> etiqueta)
# =========================================================

UNASSIGNED_TEXT = "未分配"


class LabelTable:
    """
    Tabla estática bidireccional entre códigos almacenados y etiquetas.

    Ambas direcciones se guardan explícitamente. ``aliases`` son etiquetas
    extra aceptadas en la entrada que no se usan al mostrar.
    """

    def __init__(
        self,
        field: str,
        to_label: Mapping[str, str],
        to_code: Mapping[str, str],
        aliases: Optional[Mapping[str, str]] = None,
    ):
        self.field = field
        self._to_label: Dict[str, str] = dict(to_label)
        self._to_code: Dict[str, str] = dict(to_code)
        self._aliases: Dict[str, str] = dict(aliases or {})

    def label(self, code: Optional[str]) -> Optional[str]:
        """Código almacenado -> etiqueta. Códigos desconocidos pasan sin cambios."""
        if code is None:
            return None
        return self._to_label.get(code, code)

    def code(self, value: Optional[str]) -> Optional[str]:
        """Etiqueta, alias o código -> código. None si no se reconoce."""
        if value is None:
            return None
        value = str(value).strip()
        if value in self._to_label:
            return value
        return self._to_code.get(value) or self._aliases.get(value)

    def codes(self) -> tuple:
        return tuple(self._to_label)


GENDER_LABELS = LabelTable(
    "gender",
    to_label={"male": "男", "female": "女"},
    to_code={"男": "male", "女": "female"},
)

CARE_LEVEL_LABELS = LabelTable(
    "care_level",
    to_label={
        "self-care": "自理",
        "semi-care": "介助",
        "full-care": "全护理",
        "special-care": "特护",
    },
    to_code={
        "自理": "self-care",
        "介助": "semi-care",
        "全护理": "full-care",
        "特护": "special-care",
    },
    aliases={"半自理": "semi-care", "介护": "full-care"},
)

MEMBER_STATUS_LABELS = LabelTable(
    "status",
    to_label={
        "active": "在住",
        "inactive": "离开",
        "deceased": "过世",
    },
    to_code={
        "在住": "active",
        "离开": "inactive",
        "过世": "deceased",
    },
    # Código heredado de versiones anteriores
    aliases={"on_leave": "inactive"},
)

BED_STATUS_LABELS = LabelTable(
    "status",
    to_label={
        "available": "空闲",
        "occupied": "已入住",
        "maintenance": "维修中",
    },
    to_code={
        "空闲": "available",
        "已入住": "occupied",
        "维修中": "maintenance",
    },
)
