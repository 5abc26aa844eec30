# =====================================================================
# SOBRE DE RESPUESTA COMÚN
# =====================================================================

from __future__ import annotations

from typing import Any, Dict, Optional


def envelope(code: int = 200, data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Sobre estándar de todas las respuestas: {code, message?, data?}.
    """
    body: Dict[str, Any] = {"code": code}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body
