# =====================================================================
# ESQUEMAS DE PAGINACIÓN
# =====================================================================

from __future__ import annotations

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """
    Parámetros de paginación.

    Attributes:
        page (int): Número de página, empieza en 1 (default: 1)
        limit (int): Tamaño de página (default: 10, rango: 1-100)
    """
    page: int = Field(1, ge=1, description="Número de página")
    limit: int = Field(10, ge=1, le=100, description="Tamaño de página")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
