# backend/showdb/main.py
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from .apps.accounts.router import router as accounts_router
from .apps.bulletins.router import router as bulletins_router
from .apps.calendar.router import router as calendar_router
from .apps.documents.router import router as documents_router
from .apps.maintenance.router import router as maintenance_router
from .apps.notifications.router import router as notifications_router
from .apps.rides.router import categories_router as ride_categories_router
from .apps.rides.router import router as rides_router
from .apps.risk.router import router as risk_router
from .apps.support.router import router as support_router
from .database import WriteSessionLocal

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://localhost:8080",
    ]


def _schema_strict() -> bool:
    return os.getenv("SCHEMA_STRICT", "0").strip().lower() in {"1", "true", "yes", "on"}


def _enforce_schema_head_sync_if_configured() -> None:
    """
    With SCHEMA_STRICT on, refuse to start unless the database is stamped
    at the migration head(s).
    """
    if not _schema_strict():
        return

    heads = set(ScriptDirectory.from_config(Config(str(ALEMBIC_INI))).get_heads())
    db = WriteSessionLocal()
    try:
        current = {row[0] for row in db.execute(text("SELECT version_num FROM alembic_version")).fetchall()}
    finally:
        db.close()

    if current != heads:
        raise RuntimeError(
            f"Database schema is out of date: at {sorted(current) or 'nothing'}, "
            f"expected {sorted(heads)}. Run `alembic upgrade head`."
        )
    logger.info("Schema preflight passed", extra={"heads": sorted(heads)})


@asynccontextmanager
async def lifespan(_app: FastAPI):
    _enforce_schema_head_sync_if_configured()
    yield


app = FastAPI(title="Showmen Docs API", version="1.0.0", lifespan=lifespan)
cors_origins = _allowed_origins()
allow_credentials = "*" not in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["health"])
def read_root():
    return {"status": "ok", "message": "Showmen Docs backend is running"}


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


app.include_router(accounts_router)
app.include_router(ride_categories_router)
app.include_router(rides_router)
app.include_router(bulletins_router)
app.include_router(documents_router)
app.include_router(maintenance_router)
app.include_router(risk_router)
app.include_router(calendar_router)
app.include_router(notifications_router)
app.include_router(support_router)
