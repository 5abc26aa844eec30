# =====================================================================
# MÓDULO DE MODELOS DE BASE DE DATOS
# =====================================================================

"""
Modelos de la base de datos de la residencia.
Cada modelo está separado en su propio archivo por entidad.
"""

# Importar la clase base y enumeraciones
from .base import Base, bed_status_enum, gender_enum, care_level_enum, member_status_enum

# Importar modelos por entidad
from .bed import Bed
from .member import Member
from .user import User
from .api_log import ApiLog

__all__ = [
    # Base y enums
    "Base",
    "bed_status_enum",
    "gender_enum",
    "care_level_enum",
    "member_status_enum",

    # Modelos
    "Bed",
    "Member",
    "User",
    "ApiLog",
]
