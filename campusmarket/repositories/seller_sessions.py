from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable

import asyncpg


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _row_to_dict(row) -> dict:
    return {
        'device_id': row['device_id'],
        'seller_phone': row['seller_phone'],
        'seller_name': row['seller_name'],
        'last_active': row['last_active'],
    }


@dataclass(frozen=True)
class SellerSessionsRepository:
    pool_getter: Callable[[], asyncpg.Pool | None]

    def _get_pool(self) -> asyncpg.Pool:
        pool = self.pool_getter()
        if pool is None:
            raise RuntimeError('Database pool is not available')
        return pool

    async def upsert(self, device_id: str, seller_phone: str, seller_name: str | None) -> dict:
        pool = self._get_pool()

        query = (
            'INSERT INTO seller_sessions (device_id, seller_phone, seller_name, last_active) '
            'VALUES ($1, $2, $3, $4) '
            'ON CONFLICT (device_id) DO UPDATE SET '
            'seller_phone = EXCLUDED.seller_phone, '
            'seller_name = EXCLUDED.seller_name, '
            'last_active = EXCLUDED.last_active '
            'RETURNING device_id, seller_phone, seller_name, last_active'
        )
        async with pool.acquire() as conn:
            row = await conn.fetchrow(query, device_id, seller_phone, seller_name, _utcnow())

        return _row_to_dict(row)

    async def get_by_device_id(self, device_id: str) -> dict | None:
        pool = self._get_pool()

        query = (
            'SELECT device_id, seller_phone, seller_name, last_active '
            'FROM seller_sessions WHERE device_id = $1'
        )
        async with pool.acquire() as conn:
            row = await conn.fetchrow(query, device_id)

        if row is None:
            return None

        return _row_to_dict(row)

    async def touch_last_active(self, device_id: str) -> None:
        pool = self._get_pool()

        query = 'UPDATE seller_sessions SET last_active = $2 WHERE device_id = $1'
        async with pool.acquire() as conn:
            await conn.execute(query, device_id, _utcnow())

    async def delete(self, device_id: str) -> None:
        pool = self._get_pool()

        query = 'DELETE FROM seller_sessions WHERE device_id = $1'
        async with pool.acquire() as conn:
            await conn.execute(query, device_id)
