"""FastAPI entrypoint for the marketplace order service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from marketplace.api.errors import register_exception_handlers
from marketplace.api.v1.api import api_router
from marketplace.core.config import settings
from marketplace.db import session as db_session
from marketplace.db.base import Base

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting %s (env=%s)", settings.app_name, settings.app_env)
    if settings.jwt_secret_key.startswith("dev-only"):
        logger.warning("JWT_SECRET_KEY not set; using development fallback secret.")
    Base.metadata.create_all(bind=db_session.engine)
    yield


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
register_exception_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
