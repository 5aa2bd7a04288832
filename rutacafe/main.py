# rutacafe/main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.errors import RateLimitExceeded

from rutacafe.api.router import api_router
from rutacafe.core.config import settings
from rutacafe.core.db import close_db
from rutacafe.core.indexes import startup_tasks
from rutacafe.core.rate_limit import limiter, rate_limit_handler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Fronts locales más comunes (app Expo web y panel Vite)
defaults = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8081",
    "http://127.0.0.1:8081",
    "http://localhost:19006",
}
CORS_ORIGINS = sorted(set(settings.cors_origin_list()) | defaults)

app = FastAPI(title=settings.app_name, version=settings.app_version)

# --- CORS primero ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1024)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"ok": True}


@app.get("/ready")
async def ready():
    return {"ready": getattr(app.state, "ready", False)}


# Índices y migraciones en startup (idempotente)
@app.on_event("startup")
async def startup():
    app.state.ready = False
    try:
        await startup_tasks()
    except Exception:
        # la API sigue arriba pero /ready queda en false
        logger.exception("Fallo en tareas de arranque (índices/migración)")
        return
    app.state.ready = True


@app.on_event("shutdown")
async def shutdown_db_client():
    await close_db()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("rutacafe.main:app", reload=True, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
