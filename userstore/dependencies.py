"""
Dependency container.

Wires the abstract UserPort to a concrete adapter. To swap a store
(Postgres ↔ Supabase), change `STORE_BACKEND`; nothing else changes.
"""

import asyncio
import logging

from supabase import AsyncClient, acreate_client

from userstore.adapters.postgres_adapter import PostgresUserAdapter
from userstore.adapters.supabase_adapter import SupabaseUserAdapter
from userstore.config import Settings, settings
from userstore.db import close_pool, get_pool
from userstore.ports.user_port import UserPort
from userstore.services.user_service import UserService

logger = logging.getLogger(__name__)

_user_port: UserPort | None = None
_user_port_lock = asyncio.Lock()


# ── Adapters ──────────────────────────────────────────────────


async def _get_supabase_client(config: Settings) -> AsyncClient:
    if not config.supabase_url or not config.supabase_service_role_key:
        raise ValueError(
            "STORE_BACKEND=supabase needs SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY"
        )
    # Service role key bypasses RLS for server-side operations
    return await acreate_client(config.supabase_url, config.supabase_service_role_key)


async def build_user_port(config: Settings) -> UserPort:
    """Instantiate the adapter selected by `config.store_backend`."""
    if config.store_backend == "supabase":
        client = await _get_supabase_client(config)
        logger.info("Using Supabase user store (schema '%s')", config.db_schema)
        return SupabaseUserAdapter(client=client, schema=config.db_schema)

    pool = await get_pool()
    logger.info("Using Postgres user store (schema '%s')", config.db_schema)
    return PostgresUserAdapter(pool=pool, schema=config.db_schema)


# ── Singletons ────────────────────────────────────────────────


async def get_user_port() -> UserPort:
    """Return the process-wide UserPort, building it on first use."""
    global _user_port
    async with _user_port_lock:
        if _user_port is None:
            _user_port = await build_user_port(settings)
    return _user_port


async def get_user_service() -> UserService:
    """Inject the configured port into the user service."""
    return UserService(users=await get_user_port())


async def shutdown() -> None:
    """Drop the cached port and release the Postgres pool."""
    global _user_port
    async with _user_port_lock:
        _user_port = None
    await close_pool()
