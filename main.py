import uvicorn
from datetime import datetime, timezone
from fastapi import FastAPI
from eldercare.config import settings
from eldercare.middlewares import setup_middlewares
from eldercare.exceptions import setup_exception_handlers
from eldercare.routers import auth, beds, members, health
from eldercare.logging_config import logger

app = FastAPI(title="Eldercare API", version=settings.app_version)

setup_middlewares(app)
setup_exception_handlers(app)

@app.on_event("startup")
async def startup_event():
    logger.info("Application starting", extra={"version": settings.app_version})

app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(beds.router, prefix=settings.api_prefix)
app.include_router(members.router, prefix=settings.api_prefix)
app.include_router(health.router, prefix=settings.api_prefix)


@app.get("/health")
def liveness():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


if __name__ == "__main__":
    uvicorn.run("main:app", reload=True, port=3001)
