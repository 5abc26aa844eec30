"""
Normalización de condiciones de salud.

La entrada llega en varias formas (texto libre, texto JSON, un objeto, una
lista de textos u objetos). Primero se clasifica en una forma concreta y
luego se convierte con una función por forma a una lista ordenada de
``Condition``.
"""
from __future__ import annotations

import enum
import json
import re
import secrets
import time
from typing import Any, Callable, Iterable, List, Optional, Set

from eldercare.exceptions import ValidationError
from eldercare.schemas.enums import SEVERITIES, DEFAULT_SEVERITY
from eldercare.schemas.health import Condition

NO_RECORD_TEXT = "暂无记录"
LOAD_FAILED_TEXT = "获取失败"

# Textos que versiones anteriores guardaban en lugar de una lista vacía
PLACEHOLDER_TEXTS = frozenset({NO_RECORD_TEXT, LOAD_FAILED_TEXT})

DISPLAY_SEPARATOR = ", "

_SPLIT_RE = re.compile(r"[,，]")

IdFactory = Callable[[], str]


def new_condition_id() -> str:
    """hc-<milisegundos>-<8 hex>"""
    return f"hc-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


class InputShape(enum.Enum):
    EMPTY = "empty"
    SEQUENCE = "sequence"
    OBJECT = "object"
    TEXT = "text"


def classify(raw: Any) -> InputShape:
    """Clasifica la entrada. Cualquier otro tipo es un error del llamador."""
    if raw is None:
        return InputShape.EMPTY
    if isinstance(raw, str):
        return InputShape.TEXT if raw.strip() else InputShape.EMPTY
    if isinstance(raw, (list, tuple)):
        return InputShape.SEQUENCE if raw else InputShape.EMPTY
    if isinstance(raw, dict):
        return InputShape.OBJECT
    raise ValidationError(f"Unsupported health data type: {type(raw).__name__}")


class _IdAllocator:
    """Reutiliza ids de la entrada y acuña nuevos sin repetir ninguno."""

    def __init__(self, id_factory: IdFactory):
        self._factory = id_factory
        self._used: Set[str] = set()

    def take(self, existing: Any = None) -> str:
        if existing not in (None, ""):
            candidate = str(existing)
            if candidate not in self._used:
                self._used.add(candidate)
                return candidate
        candidate = self._factory()
        while candidate in self._used:
            candidate = self._factory()
        self._used.add(candidate)
        return candidate


def _coerce_severity(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in SEVERITIES:
        return value.strip().lower()
    return DEFAULT_SEVERITY


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return json.dumps(value, ensure_ascii=False)


def _from_name(name: str, ids: _IdAllocator) -> Optional[Condition]:
    name = name.strip()
    if not name:
        return None
    return Condition(id=ids.take(), name=name, severity=DEFAULT_SEVERITY)


def _from_object(item: dict, ids: _IdAllocator) -> Optional[Condition]:
    name = item.get("name")
    if name is None:
        return None
    name = _scalar_text(name)
    if not name:
        return None
    return Condition(id=ids.take(item.get("id")), name=name, severity=_coerce_severity(item.get("severity")))


def _from_sequence(items: Iterable[Any], ids: _IdAllocator) -> List[Condition]:
    conditions = []
    for item in items:
        if isinstance(item, dict):
            condition = _from_object(item, ids)
        elif item is None:
            condition = None
        else:
            condition = _from_name(_scalar_text(item), ids)
        if condition is not None:
            conditions.append(condition)
    return conditions


def _from_text(text: str, ids: _IdAllocator) -> List[Condition]:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        # No es JSON (o anida demasiado): lista separada por comas
        return _from_sequence(_SPLIT_RE.split(text), ids)

    if isinstance(parsed, (list, dict)) or parsed is None:
        return _normalize(parsed, ids)
    condition = _from_name(_scalar_text(parsed), ids)
    return [condition] if condition else []


def _normalize(raw: Any, ids: _IdAllocator) -> List[Condition]:
    shape = classify(raw)
    if shape is InputShape.EMPTY:
        return []
    if shape is InputShape.SEQUENCE:
        return _from_sequence(raw, ids)
    if shape is InputShape.OBJECT:
        condition = _from_object(raw, ids)
        return [condition] if condition else []
    return _from_text(raw, ids)


def normalize_conditions(raw: Any, id_factory: IdFactory = new_condition_id) -> List[Condition]:
    """
    Convierte cualquier forma de entrada de salud en una lista de Condition.

    Nunca falla con texto: el JSON mal formado se trata como lista separada
    por comas. Los ids presentes en la entrada se conservan.
    """
    return _normalize(raw, _IdAllocator(id_factory))


def to_display_text(conditions: Iterable[Condition]) -> str:
    names = [c.name for c in conditions]
    return DISPLAY_SEPARATOR.join(names) if names else NO_RECORD_TEXT


def serialize_conditions(conditions: Iterable[Condition]) -> str:
    return json.dumps([c.model_dump() for c in conditions], ensure_ascii=False)


def load_stored_conditions(stored: Optional[str], id_factory: IdFactory = new_condition_id) -> List[Condition]:
    """Lee members.health_status. Los textos de relleno heredados cuentan como vacío."""
    if stored is None or stored.strip() in PLACEHOLDER_TEXTS:
        return []
    return normalize_conditions(stored, id_factory)


def is_canonical(stored: Optional[str], conditions: List[Condition]) -> bool:
    """True si el texto guardado ya es la serialización canónica."""
    if not conditions:
        return stored is None or stored == serialize_conditions([])
    return stored == serialize_conditions(conditions)


def pick_health_input(fields_set: Set[str], health_conditions: Any = None,
                      health_status: Any = None, health_notes: Any = None) -> tuple:
    """
    Elige la fuente de condiciones de una petición.

    Prioridad: health_conditions, health_status, health_notes. Devuelve
    (provided, raw). ``provided`` es False si la petición no trae ninguna,
    en cuyo caso las condiciones guardadas no se tocan.
    """
    for field, value in (("health_conditions", health_conditions),
                         ("health_status", health_status)):
        if field in fields_set and value is not None:
            return True, value
    if "health_notes" in fields_set and health_notes:
        return True, [health_notes]
    return False, None
