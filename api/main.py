import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, settings
from core.logging import configure_logging
from users import router as users_router
from webhooks import router as webhooks_router

configure_logging()

_started_at = time.monotonic()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # The DB pool is created lazily on first use; close it on shutdown.
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(
    title=settings.api_name(),
    description="API for Kontaktar service marketplace",
    version=settings.api_version(),
    lifespan=lifespan,
)

origins = settings.cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    # Browsers reject credentials with a wildcard origin.
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router.router, tags=["users"])
app.include_router(webhooks_router.router, tags=["webhooks"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "uptime": round(time.monotonic() - _started_at, 3),
        "timestamp": _now_iso(),
    }


@app.get("/")
def root() -> dict:
    return {
        "name": settings.api_name(),
        "version": settings.api_version(),
        "status": "ok",
        "timestamp": _now_iso(),
    }
