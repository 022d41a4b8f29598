"""Seller session cache keyed by device id.

The remote ``seller_sessions`` table is the source of truth. Local storage
keeps a copy of the seller's phone and name and is used whenever the remote
store cannot answer. No method here raises: remote and storage failures are
logged and turned into fallback results.
"""

import asyncio
import logging

from campusmarket.repositories.seller_sessions import SellerSessionsRepository
from campusmarket.schemas.session import (
    DEFAULT_SELLER_NAME,
    SaveSessionResult,
    SellerInfo,
    SellerSession,
)
from campusmarket.services.device import DeviceIdentityService
from campusmarket.storage.local import SELLER_NAME_KEY, SELLER_PHONE_KEY, LocalStorage

logger = logging.getLogger(__name__)


class SellerSessionService:
    def __init__(
        self,
        repository: SellerSessionsRepository,
        storage: LocalStorage,
        device_identity: DeviceIdentityService,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.device_identity = device_identity
        self._background_tasks: set[asyncio.Task] = set()

    def _resolve_device_id(self) -> str | None:
        try:
            return self.device_identity.resolve_device_id()
        except Exception as exc:
            logger.warning('Device id could not be resolved: %s', exc)
            return None

    def _cache_seller(self, phone: str, name: str | None, keep_cached_name: bool = False) -> None:
        try:
            self.storage.set_item(SELLER_PHONE_KEY, phone)
            if name:
                self.storage.set_item(SELLER_NAME_KEY, name)
            elif not keep_cached_name:
                self.storage.remove_item(SELLER_NAME_KEY)
        except Exception as exc:
            logger.warning('Could not cache seller in local storage: %s', exc)

    def _cached_session(self, device_id: str | None) -> SellerSession | None:
        try:
            cached_phone = self.storage.get_item(SELLER_PHONE_KEY)
            cached_name = self.storage.get_item(SELLER_NAME_KEY)
        except Exception as exc:
            logger.warning('Could not read seller from local storage: %s', exc)
            return None

        if not cached_phone:
            return None

        return SellerSession(
            device_id=device_id,
            seller_phone=cached_phone,
            seller_name=cached_name,
            fallback=True,
        )

    async def save_session(self, phone: str, name: str | None) -> SaveSessionResult:
        device_id = self._resolve_device_id()
        logger.info('Saving seller session for device %s', device_id)

        try:
            if device_id is None:
                raise RuntimeError('Device id is not available')
            row = await self.repository.upsert(
                device_id=device_id,
                seller_phone=phone,
                seller_name=name,
            )
        except Exception as exc:
            logger.warning('Session save failed, using local storage only: %s', exc)
            self._cache_seller(phone, name)
            return SaveSessionResult(success=True, fallback=True)

        self._cache_seller(phone, name)
        logger.info('Session saved to remote store for device %s', device_id)
        return SaveSessionResult(success=True, fallback=False, session=SellerSession(**row))

    async def load_session(self) -> SellerSession | None:
        device_id = self._resolve_device_id()
        cached = self._cached_session(device_id)

        try:
            if device_id is None:
                raise RuntimeError('Device id is not available')
            row = await self.repository.get_by_device_id(device_id)
        except Exception as exc:
            logger.warning('Session load failed: %s', exc)
            return cached

        if row is not None:
            self._cache_seller(row['seller_phone'], row['seller_name'], keep_cached_name=True)
            self._schedule_touch(device_id)
            logger.info('Session loaded from remote store for device %s', device_id)
            return SellerSession(**row)

        if cached is not None:
            logger.info('Using cached session from local storage for device %s', device_id)
            return cached

        logger.info('No session found for device %s', device_id)
        return None

    def _schedule_touch(self, device_id: str) -> None:
        task = asyncio.create_task(self._touch_last_active(device_id))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _touch_last_active(self, device_id: str) -> None:
        try:
            await self.repository.touch_last_active(device_id)
        except Exception as exc:
            logger.warning('Could not refresh last_active for device %s: %s', device_id, exc)

    async def wait_for_background_tasks(self) -> None:
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks)

    async def clear_session(self) -> bool:
        device_id = self._resolve_device_id()

        if device_id is not None:
            try:
                await self.repository.delete(device_id)
            except Exception as exc:
                logger.warning('Remote session delete failed for device %s: %s', device_id, exc)

        try:
            self.storage.remove_item(SELLER_PHONE_KEY)
            self.storage.remove_item(SELLER_NAME_KEY)
        except Exception as exc:
            logger.warning('Could not clear seller from local storage: %s', exc)

        logger.info('Session cleared for device %s', device_id)
        return True

    async def is_known_seller(self) -> bool:
        return await self.load_session() is not None

    async def describe_seller(self) -> SellerInfo | None:
        session = await self.load_session()
        if session is None:
            return None

        return SellerInfo(
            phone=session.seller_phone,
            name=session.seller_name or DEFAULT_SELLER_NAME,
            device_id=session.device_id,
        )
