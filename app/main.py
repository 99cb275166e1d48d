"""FastAPI application entry point.

Wires logging into the lifespan, CORS from settings, and the health and
candidate routers.  ``run()`` serves the app with uvicorn.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.supabase import reset_supabase
from app.routers import candidates, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    logger.info(
        "application_starting",
        extra={
            "service": settings.SERVICE_NAME,
            "version": settings.API_VERSION,
            "table": settings.CANDIDATES_TABLE,
        },
    )
    yield
    reset_supabase()
    logger.info("application_stopped")


app = FastAPI(
    title="Candidate Tracking API",
    description="Create, read, update, delete and page hiring candidates",
    version=settings.API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(candidates.router, prefix="/api/candidates", tags=["Candidates"])


def run() -> None:
    """Serve the app on ``settings.HOST``:``settings.PORT``."""
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
