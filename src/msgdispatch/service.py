"""Service components wiring and lifecycle."""

import asyncio
import logging
from dataclasses import dataclass, field

from msgdispatch.cache.dedup import DedupCache, RedisDedupCache
from msgdispatch.config import Settings
from msgdispatch.db.session import init_models
from msgdispatch.delivery.client import DeliveryClient
from msgdispatch.health import HealthState
from msgdispatch.store.messages import MessageStore, SQLMessageStore
from msgdispatch.store.seed import seed_messages
from msgdispatch.worker.dispatcher import DispatchWorker

logger = logging.getLogger(__name__)


@dataclass
class ServiceComponents:
    """Everything the HTTP layer and the lifespan hooks share."""

    store: MessageStore
    cache: DedupCache
    client: DeliveryClient
    worker: DispatchWorker
    health: HealthState = field(default_factory=HealthState)


def build_components(settings: Settings) -> ServiceComponents:
    """Construct store, cache, delivery client and worker from settings."""
    store = SQLMessageStore.from_settings(settings)
    cache = RedisDedupCache.from_settings(settings)
    client = DeliveryClient.from_settings(settings)
    worker = DispatchWorker.from_settings(settings, store, client, cache)
    return ServiceComponents(store=store, cache=cache, client=client, worker=worker)


async def startup(components: ServiceComponents, settings: Settings) -> None:
    """Bring the service up: schema, cache check, seeding, worker, health.

    Raises:
        Exception: If the cache is unreachable or the schema cannot be created.
    """
    if settings.database_create_tables and isinstance(components.store, SQLMessageStore):
        await init_models(components.store.engine)

    await components.cache.ping()

    if settings.seed_enabled:
        await seed_messages(
            components.store,
            target=settings.dispatch_batch_size,
            count=settings.seed_message_count,
            recipient=settings.seed_recipient,
        )

    if settings.dispatch_autostart:
        components.worker.start()

    components.health.set_status(True)
    logger.info(f"{settings.service_name} started (environment: {settings.environment})")


async def shutdown(components: ServiceComponents, settings: Settings) -> None:
    """Drain and tear down the service.

    Health goes false between two drain pauses so that probes see the
    instance as unhealthy before connections are closed.
    """
    if settings.shutdown_sleep_seconds > 0:
        await asyncio.sleep(settings.shutdown_sleep_seconds)

    components.health.set_status(False)

    if settings.shutdown_sleep_seconds > 0:
        await asyncio.sleep(settings.shutdown_sleep_seconds)

    components.worker.stop()
    try:
        await asyncio.wait_for(
            components.worker.wait(),
            timeout=settings.dispatch_cycle_timeout_seconds,
        )
    except TimeoutError:
        logger.warning("Dispatch worker did not finish its cycle before shutdown")

    for name, close in (
        ("delivery client", components.client.aclose),
        ("dedup cache", components.cache.close),
        ("message store", components.store.close),
    ):
        try:
            await close()
        except Exception as e:
            logger.error(f"Error closing {name}: {e}")

    logger.info(f"{settings.service_name} shut down")
