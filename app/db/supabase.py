"""Process-wide async Supabase client.

``get_supabase()`` builds the client on first use with the schema and
PostgREST timeout from ``settings``; ``reset_supabase()`` drops it (app
shutdown, tests).
"""

import logging

from supabase import AsyncClient, AsyncClientOptions, acreate_client

from app.core.config import settings

logger = logging.getLogger(__name__)

_client: AsyncClient | None = None


async def get_supabase() -> AsyncClient:
    """Return the shared client, creating it on first call."""
    global _client
    if _client is None:
        options = AsyncClientOptions(
            schema=settings.STORE_SCHEMA,
            postgrest_client_timeout=settings.STORE_TIMEOUT_SECONDS,
        )
        _client = await acreate_client(
            settings.SUPABASE_URL, settings.SUPABASE_KEY, options=options
        )
        logger.info(
            "store_client_created",
            extra={"schema": settings.STORE_SCHEMA, "table": settings.CANDIDATES_TABLE},
        )
    return _client


def reset_supabase() -> None:
    """Forget the cached client; the next ``get_supabase()`` builds a new one."""
    global _client
    _client = None
