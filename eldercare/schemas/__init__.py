# =====================================================================
# MÓDULO DE ESQUEMAS DE PYDANTIC
# =====================================================================

"""
Esquemas de Pydantic de la API, uno por entidad.
"""

from .enums import (
    BedStatus,
    Severity,
    SEVERITIES,
    DEFAULT_SEVERITY,
    UNASSIGNED_TEXT,
    LabelTable,
    GENDER_LABELS,
    CARE_LEVEL_LABELS,
    MEMBER_STATUS_LABELS,
    BED_STATUS_LABELS,
)
from .common import envelope
from .pagination import PaginationParams
from .auth import RegisterRequest, LoginRequest, UserOut, LoginData
from .bed import BedCreate, BedUpdate, BedAssign, BedStatistics
from .member import MemberCreate, MemberUpdate
from .health import Condition, HealthMonitorUpdate, HealthMonitorResult
