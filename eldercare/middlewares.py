from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from eldercare.config import settings
from eldercare.db import AsyncSessionLocal
from eldercare.models import ApiLog
import asyncio
import time
import logging

logger = logging.getLogger(__name__)

REQUEST_BODY_LIMIT = 1000

# Referencias a las tareas de registro en curso (evita que el GC las cancele)
_pending_logs: set = set()


async def record_api_call(endpoint: str, method: str, request_body: str, response_code: int, response_time: int) -> None:
    """
    Guarda una fila en api_logs. Best-effort: un fallo solo se registra
    en el log local, nunca afecta a la respuesta.
    """
    try:
        async with AsyncSessionLocal() as session:
            session.add(ApiLog(
                endpoint=endpoint[:255],
                method=method,
                request_body=request_body[:REQUEST_BODY_LIMIT],
                response_code=response_code,
                response_time=response_time,
            ))
            await session.commit()
    except Exception as e:
        logger.error("Failed to record API call", extra={"endpoint": endpoint, "error": str(e)})


def schedule_api_log(**fields) -> None:
    task = asyncio.create_task(record_api_call(**fields))
    _pending_logs.add(task)
    task.add_done_callback(_pending_logs.discard)


def setup_middlewares(app: FastAPI):
    # GZIP Compression - comprime respuestas > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    access_logger = logging.getLogger("uvicorn.error")

    @app.middleware("http")
    async def timing_and_api_log(request: Request, call_next):
        start = time.time()
        body = b""
        if settings.api_log_enabled and request.method in ("POST", "PUT", "PATCH"):
            body = await request.body()

        resp = await call_next(request)
        dur = (time.time() - start) * 1000
        access_logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, resp.status_code, dur)

        if settings.api_log_enabled:
            schedule_api_log(
                endpoint=str(request.url.path) + (f"?{request.url.query}" if request.url.query else ""),
                method=request.method,
                request_body=body.decode("utf-8", errors="replace"),
                response_code=resp.status_code,
                response_time=int(dur),
            )
        return resp
