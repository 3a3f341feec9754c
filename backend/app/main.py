# /backend/app/main.py

from __future__ import annotations
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import CORS_ORIGINS, LOG_LEVEL, STATIC_DIR
from app.db import get_db, engine
from app.exception_handlers import setup_exception_handlers
from app.api.routers import (
    auth,
    user,
    therapist,
    booking,
    appointments,
    messenger,
    education,
    progress,
    dashboard,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Ask Your OT API starting")
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Ask Your OT API stopped")

app = FastAPI(
    title="Ask Your OT API",
    lifespan=lifespan,
)

# CORS first so every route, static included, gets the headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# uploaded avatars live under STATIC_DIR/avatars
os.makedirs(os.path.join(STATIC_DIR, "avatars"), exist_ok=True)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
logger.debug("Serving static files from: %s", STATIC_DIR)

app.include_router(auth.router)
app.include_router(user.router)
app.include_router(therapist.router)
app.include_router(booking.router)
app.include_router(appointments.router)
app.include_router(messenger.router)
app.include_router(education.router)
app.include_router(progress.router)
app.include_router(dashboard.router)


@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/db-health")
async def db_health(db: AsyncSession = Depends(get_db)):
    result = await db.execute(text("SELECT 1"))
    return {"db": "ok", "result": result.scalar_one()}
