"""Liveness and table store connectivity check."""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter
from starlette.responses import JSONResponse

from app.core.config import settings
from app.db.table_store import get_candidate_store

logger = logging.getLogger(__name__)

router = APIRouter()


async def _ping_store() -> float | None:
    """Round-trip time of a minimal store read in ms, ``None`` on failure."""
    started = time.perf_counter()
    try:
        store = await get_candidate_store()
        await store.ping()
    except Exception:
        logger.warning(
            "health_store_unreachable",
            extra={"table": settings.CANDIDATES_TABLE},
            exc_info=True,
        )
        return None
    return round((time.perf_counter() - started) * 1000, 1)


@router.get("/health")
async def health_check() -> Any:
    """200 with ``database: connected`` when the candidates table answers, else 503."""
    latency_ms = await _ping_store()
    connected = latency_ms is not None

    payload: dict[str, Any] = {
        "status": "healthy" if connected else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.SERVICE_NAME,
        "version": settings.API_VERSION,
        "database": "connected" if connected else "disconnected",
        "table": settings.CANDIDATES_TABLE,
        "latencyMs": latency_ms,
    }
    if not connected:
        return JSONResponse(status_code=503, content=payload)
    return payload
