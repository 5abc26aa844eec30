from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, DBAPIError
import logging
from typing import Any, Dict, Optional

from eldercare.config import settings

logger = logging.getLogger(__name__)


# ---------- Errores de la aplicación ----------

class AppError(Exception):
    """Error con código HTTP y tipo estable para el cliente."""

    status_code = 500
    error_type = "internal_error"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    error_type = "validation_error"
    message = "Missing or invalid fields"


class NotFoundError(AppError):
    status_code = 404
    error_type = "not_found"
    message = "Resource not found"


class BedNotFound(NotFoundError):
    error_type = "bed_not_found"
    message = "Bed not found"


class MemberNotFound(NotFoundError):
    error_type = "member_not_found"
    message = "Member not found"


class UnauthorizedError(AppError):
    status_code = 401
    error_type = "unauthorized"
    message = "Not authenticated or session expired"


class ForbiddenError(AppError):
    status_code = 403
    error_type = "forbidden"
    message = "Insufficient permissions"


class ConflictError(AppError):
    status_code = 409
    error_type = "conflict"
    message = "Request conflicts with current state"


class BedUnavailable(ConflictError):
    # Los clientes existentes esperan 400 para este caso
    status_code = 400
    error_type = "bed_unavailable"
    message = "Bed is not available"


class UsernameTaken(ConflictError):
    status_code = 400
    error_type = "username_taken"
    message = "Username already exists"


class InternalError(AppError):
    pass


def error_body(status_code: int, message: Any, error_type: str, error: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": status_code, "message": message, "type": error_type}
    if error and settings.debug:
        body["error"] = error
    return body


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_type}: {exc.message} ({exc.detail})")
        else:
            logger.warning(f"{exc.error_type}: {exc.message}")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.message, exc.error_type, exc.detail)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Solo loguear como ERROR si es un error del servidor (5xx)
        if exc.status_code >= 500:
            logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
        elif exc.status_code >= 400:
            logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.detail, "http_error")
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Campos ausentes o mal tipados: error del cliente
        logger.warning(f"Validation Error: {exc.errors()}")
        body = error_body(400, "Missing or invalid fields", "validation_error")
        body["details"] = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        error_message = str(exc.orig).lower() if hasattr(exc, 'orig') else str(exc)

        if "unique" in error_message or "duplicate" in error_message:
            message = "A record with the same unique data already exists"
        elif "foreign key" in error_message:
            message = "Record is referenced by other records"
        elif "not null" in error_message or "not-null" in error_message:
            message = "Missing required fields"
        else:
            message = "Database integrity error"

        logger.error(f"Database Integrity Error: {error_message}")
        return JSONResponse(
            status_code=400,
            content=error_body(400, message, "integrity_error", error_message)
        )

    @app.exception_handler(DBAPIError)
    async def db_exception_handler(request: Request, exc: DBAPIError):
        logger.error(f"Database Error: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content=error_body(500, "Database error", "database_error", str(exc))
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected Error: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(500, "Internal server error", "internal_error", str(exc))
        )
