import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from campusmarket.clients.kafka import KafkaReviewProducer
from campusmarket.repositories.db import close_db, create_schema, get_db_pool, init_db
from campusmarket.repositories.seller_sessions import SellerSessionsRepository
from campusmarket.services.device import DeviceIdentityService
from campusmarket.services.listings import ListingSubmissionService
from campusmarket.services.rate_limit import RateLimiter
from campusmarket.services.session import SellerSessionService
from campusmarket.storage.local import JsonFileStorage, LocalStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    storage: LocalStorage
    listings: ListingSubmissionService
    sessions: SellerSessionService
    device_identity: DeviceIdentityService


@asynccontextmanager
async def lifespan(storage: LocalStorage | None = None) -> AsyncIterator[Services]:
    storage = storage if storage is not None else JsonFileStorage.from_env()

    await init_db()
    if get_db_pool() is not None:
        try:
            await create_schema()
        except Exception as exc:
            logger.warning('Could not create seller_sessions table: %s', exc)

    review_producer = KafkaReviewProducer.from_env()
    if review_producer is not None:
        try:
            await review_producer.start()
            logger.info('Kafka review producer initialized')
        except Exception as exc:
            logger.warning('Kafka review producer initialization failed: %s', exc)
            review_producer = None
    else:
        logger.warning('Kafka review producer is disabled: KAFKA_BOOTSTRAP_SERVERS is not set')

    device_identity = DeviceIdentityService(storage)
    services = Services(
        storage=storage,
        listings=ListingSubmissionService(RateLimiter(storage), review_producer),
        sessions=SellerSessionService(
            repository=SellerSessionsRepository(get_db_pool),
            storage=storage,
            device_identity=device_identity,
        ),
        device_identity=device_identity,
    )
    try:
        yield services
    finally:
        await services.sessions.wait_for_background_tasks()
        if review_producer is not None:
            await review_producer.stop()
        await close_db()
        logger.info('Shutting down...')
