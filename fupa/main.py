"""
FUPA Snack attendance backend: ASGI application.

Run with any ASGI server, e.g. ``uvicorn fupa.main:app``.  The JSON API is
mounted under ``API_V1_PREFIX``; the service worker and web manifest sit at
the root so the worker's scope covers the whole PWA.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import select

from fupa.api import shell
from fupa.api.v1.api import api_router
from fupa.api.v1.endpoints.auth import limiter
from fupa.core.config import settings
from fupa.core.exceptions import register_exception_handlers
from fupa.core.security import hash_password
from fupa.db.base import Base
from fupa.db.session import async_session_factory, engine
# Imported for their side effect of registering tables on Base.metadata
from fupa.models.announcement import Announcement, Notification  # noqa: F401
from fupa.models.attendance import AttendanceRecord  # noqa: F401
from fupa.models.override import OverrideRule  # noqa: F401
from fupa.models.user import User

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

FRONTEND_DIR = Path(__file__).resolve().parent.parent / "frontend"


async def _ensure_admin() -> None:
    """Create the bootstrap admin account on an empty install."""
    async with async_session_factory() as session:
        found = await session.scalar(select(User.uid).where(User.email == settings.FIRST_ADMIN_EMAIL))
        if found is not None:
            return
        session.add(
            User(
                uid=uuid.uuid4().hex,
                email=settings.FIRST_ADMIN_EMAIL,
                hashed_password=hash_password(settings.FIRST_ADMIN_PASSWORD),
                name="Administrator",
                role="admin",
            )
        )
        await session.commit()
    logger.info("Bootstrap admin %s created", settings.FIRST_ADMIN_EMAIL)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await _ensure_admin()
    logger.info("%s v%s ready", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Engine disposed, bye")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Geolocated, photo-verified clock in / clock out for FUPA Snack",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # slowapi looks the limiter up on app.state
    application.state.limiter = limiter
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    application.include_router(shell.router)

    # Static PWA pages; mounted last since "/" matches everything
    if FRONTEND_DIR.is_dir():
        application.mount("/", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")
        logger.info("Serving PWA pages from %s", FRONTEND_DIR)

    return application


app = create_app()
