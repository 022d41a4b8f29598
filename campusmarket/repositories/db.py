import logging
import os
from typing import Optional

import asyncpg

logger = logging.getLogger(__name__)

_db_pool: Optional[asyncpg.Pool] = None

SELLER_SESSIONS_DDL = (
    'CREATE TABLE IF NOT EXISTS seller_sessions ('
    'device_id TEXT PRIMARY KEY, '
    'seller_phone TEXT NOT NULL, '
    'seller_name TEXT, '
    'last_active TIMESTAMP NOT NULL'
    ')'
)


async def init_db(database_url: str | None = None) -> None:
    global _db_pool
    if _db_pool is not None:
        return

    db_url = database_url or os.getenv('DATABASE_URL')
    if not db_url:
        logger.warning('DATABASE_URL is not set. Seller sessions will use local storage only.')
        return

    try:
        _db_pool = await asyncpg.create_pool(dsn=db_url, timeout=2)
        logger.info('Database pool initialized')
    except Exception as exc:
        logger.warning('Database pool initialization failed: %s', exc)
        _db_pool = None


async def create_schema(pool: asyncpg.Pool | None = None) -> bool:
    pool = pool or _db_pool
    if pool is None:
        logger.warning('Database pool is not available, skipping schema creation')
        return False

    async with pool.acquire() as conn:
        await conn.execute(SELLER_SESSIONS_DDL)
    logger.info('seller_sessions table is ready')
    return True


async def close_db() -> None:
    global _db_pool
    if _db_pool is None:
        return

    await _db_pool.close()
    _db_pool = None
    logger.info('Database pool closed')


def get_db_pool() -> Optional[asyncpg.Pool]:
    return _db_pool
