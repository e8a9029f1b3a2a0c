"""asyncpg pool for the account tables, plus the schema migration runner."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from taiko_webui.config import get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Return the shared pool.

    Raises:
        RuntimeError: init_database() has not run
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized")
    return _pool


async def init_database() -> asyncpg.Pool:
    """Open the shared pool sized from settings. Repeat calls reuse it."""
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            settings.postgres_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
        logger.info(
            "database_pool_created",
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
    return _pool


async def close_database() -> None:
    global _pool

    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.close()
    logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply every ``*.sql`` file in name order inside one transaction.

    The DDL uses IF NOT EXISTS, so applying the set on each startup is safe.

    Returns:
        Names of the files applied
    """
    files = sorted(migrations_dir.glob("*.sql"))
    if not files:
        logger.warning("no_migrations_found", path=str(migrations_dir))
        return []

    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            for path in files:
                try:
                    await conn.execute(path.read_text())
                except asyncpg.PostgresError as e:
                    logger.error("migration_failed", file=path.name, error=str(e))
                    raise
                logger.info("migration_applied", file=path.name)
    return [path.name for path in files]


async def health_check() -> bool:
    """True if a pooled connection answers ``SELECT 1``."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
