# =====================================================================
# MODELO BASE Y ENUMERACIONES PARA LA BASE DE DATOS
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Enum

# ---------- Clase Base para todos los modelos ----------
class Base(DeclarativeBase):
    """
    Clase base declarativa para todos los modelos de SQLAlchemy.
    """
    pass

# ---------- Enumeraciones de la base de datos ----------

bed_status_enum = Enum(
    'available', 'occupied', 'maintenance',
    name='bed_status_enum',
)

gender_enum = Enum(
    'male', 'female',
    name='gender_enum',
)

care_level_enum = Enum(
    'self-care', 'semi-care', 'full-care', 'special-care',
    name='care_level_enum',
)

member_status_enum = Enum(
    'active', 'inactive', 'deceased',
    name='member_status_enum',
)
