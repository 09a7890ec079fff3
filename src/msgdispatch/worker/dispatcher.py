"""Scheduled dispatch worker."""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from msgdispatch.cache.dedup import DedupCache
from msgdispatch.config import Settings
from msgdispatch.db.enums import DISPATCHABLE_STATUSES, MessageStatus
from msgdispatch.db.models import Message
from msgdispatch.delivery.client import DeliveryClient, DeliveryResult
from msgdispatch.metrics.definitions import (
    DEDUP_CACHE_ERRORS_TOTAL,
    DELIVERY_DURATION,
    DISPATCH_CYCLE_DURATION,
    DISPATCH_CYCLES_TOTAL,
    MESSAGES_PROCESSED_TOTAL,
    WORKER_RUNNING,
)
from msgdispatch.store.messages import MessageStore
from msgdispatch.worker.retry import RetryExhaustedError, RetryPolicy
from msgdispatch.worker.validation import is_valid_message

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    """What happened to one message in a cycle."""

    SENT = "sent"
    FAILED = "failed"
    INVALID = "invalid"
    UNRECORDED = "unrecorded"  # status write never landed


@dataclass
class CycleResult:
    """Summary of one dispatch cycle."""

    fetched: int = 0
    sent: int = 0
    failed: int = 0
    invalid: int = 0
    unrecorded: int = 0
    timed_out: bool = False
    fetch_error: bool = False

    def add(self, outcome: DispatchOutcome) -> None:
        setattr(self, outcome.value, getattr(self, outcome.value) + 1)

    @property
    def label(self) -> str:
        if self.timed_out:
            return "timeout"
        if self.fetch_error:
            return "fetch_error"
        if self.fetched == 0:
            return "empty"
        return "completed"


class DispatchWorker:
    """Background worker that sends pending and failed messages on a fixed interval.

    Each cycle fetches at most ``batch_size`` messages, processes all of them
    concurrently and waits for every one before the cycle ends. One cycle
    deadline is shared by every call made during that cycle.

    ``start()`` and ``stop()`` only flip state under a lock and return
    immediately. ``stop()`` lets an in-flight cycle finish; the loop exits at
    its next wait.
    """

    def __init__(
        self,
        store: MessageStore,
        client: DeliveryClient,
        cache: DedupCache,
        *,
        batch_size: int = 2,
        interval: float = 120.0,
        cycle_timeout: float = 30.0,
        retry_policy: RetryPolicy | None = None,
    ):
        self.store = store
        self.client = client
        self.cache = cache
        self.batch_size = batch_size
        self.interval = interval
        self.cycle_timeout = cycle_timeout
        self.retry_policy = retry_policy or RetryPolicy()

        self._lock = threading.Lock()
        self._running = False
        self._task: asyncio.Task | None = None
        self._shutdown: asyncio.Event | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: MessageStore,
        client: DeliveryClient,
        cache: DedupCache,
    ) -> "DispatchWorker":
        return cls(
            store,
            client,
            cache,
            batch_size=settings.dispatch_batch_size,
            interval=settings.dispatch_interval_seconds,
            cycle_timeout=settings.dispatch_cycle_timeout_seconds,
            retry_policy=RetryPolicy(
                max_attempts=settings.dispatch_status_write_attempts,
                delay=settings.dispatch_status_write_delay_ms / 1000.0,
            ),
        )

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Schedule the dispatch loop; a no-op if already running.

        Must be called from the running event loop. The first cycle starts
        right away instead of after one interval.
        """
        with self._lock:
            if self._running:
                return
            shutdown = asyncio.Event()
            previous = self._task if self._task is not None and not self._task.done() else None
            self._task = asyncio.create_task(self._run(shutdown, previous))
            self._shutdown = shutdown
            self._running = True

        WORKER_RUNNING.set(1)
        logger.info(
            f"Dispatch worker started (interval: {self.interval}s, batch size: {self.batch_size})"
        )

    def stop(self) -> None:
        """Stop scheduling cycles; a no-op if already stopped. Never waits."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._shutdown is not None:
                self._shutdown.set()

        WORKER_RUNNING.set(0)
        logger.info("Dispatch worker stopped")

    async def wait(self) -> None:
        """Wait for the current loop to exit after stop()."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _run(self, shutdown: asyncio.Event, previous: asyncio.Task | None) -> None:
        # A restart must not overlap the previous loop's in-flight cycle
        if previous is not None:
            await asyncio.wait({previous})

        loop = asyncio.get_running_loop()
        while not shutdown.is_set():
            # Cycle starts stay on a fixed interval regardless of cycle duration
            cycle_start = loop.time()
            try:
                await self.process()
            except Exception:
                logger.exception("Error in dispatch worker loop")

            remaining = max(0.0, self.interval - (loop.time() - cycle_start))
            try:
                await asyncio.wait_for(shutdown.wait(), timeout=remaining)
            except TimeoutError:
                continue

        logger.debug("Dispatch loop exited")

    async def process(self) -> CycleResult:
        """Run one cycle: fetch a batch, process each message concurrently, join."""
        logger.info("Dispatch cycle processing")
        result = CycleResult()
        start_time = time.perf_counter()

        try:
            async with asyncio.timeout(self.cycle_timeout):
                await self._process_batch(result)
        except TimeoutError:
            result.timed_out = True
            logger.error(f"Dispatch cycle timed out after {self.cycle_timeout}s")

        DISPATCH_CYCLE_DURATION.observe(time.perf_counter() - start_time)
        DISPATCH_CYCLES_TOTAL.labels(result=result.label).inc()
        return result

    async def _process_batch(self, result: CycleResult) -> None:
        try:
            messages = await self.store.fetch(DISPATCHABLE_STATUSES, limit=self.batch_size)
        except Exception as e:
            result.fetch_error = True
            logger.error(f"Error getting messages: {e}")
            return

        result.fetched = len(messages)
        if not messages:
            logger.info("No unsent messages found")
            return

        outcomes = await asyncio.gather(
            *(self.process_message(message) for message in messages),
            return_exceptions=True,
        )

        for message, outcome in zip(messages, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Message {message.id} processing failed: {outcome}", exc_info=outcome)
            elif isinstance(outcome, DispatchOutcome):
                result.add(outcome)

    async def process_message(self, message: Message) -> DispatchOutcome:
        """Validate, send and record a single message."""
        outcome = await self._dispatch(message)
        MESSAGES_PROCESSED_TOTAL.labels(outcome=outcome.value).inc()
        return outcome

    async def _dispatch(self, message: Message) -> DispatchOutcome:
        if not is_valid_message(message):
            logger.info(f"Message {message.id} is invalid")
            # Invalid status is written once, without retries
            try:
                await self.store.update_status(message.id, MessageStatus.INVALID, None)
            except Exception as e:
                logger.error(f"Error updating message {message.id} status to invalid: {e}")
                return DispatchOutcome.UNRECORDED
            return DispatchOutcome.INVALID

        try:
            delivery = await self._deliver(message)
        except Exception as send_error:
            logger.error(f"Error sending message {message.id}, marking as failed: {send_error}")
            try:
                await self.retry_policy.call(
                    lambda: self.store.update_status(message.id, MessageStatus.FAILED, None)
                )
            except RetryExhaustedError as write_error:
                logger.error(
                    f"Error updating message {message.id} status to failed: "
                    f"{write_error.last_error}"
                )
                return DispatchOutcome.UNRECORDED
            return DispatchOutcome.FAILED

        try:
            await self.retry_policy.call(
                lambda: self.store.update_status(message.id, MessageStatus.SENT, datetime.now(UTC))
            )
        except RetryExhaustedError as e:
            # Delivered but not recorded: a later cycle will pick it up again
            logger.error(
                f"Error updating message {message.id} status to sent "
                f"(provider id {delivery.message_id}): {e.last_error}"
            )
            return DispatchOutcome.UNRECORDED

        try:
            await self.cache.record(delivery.message_id)
        except Exception as e:
            DEDUP_CACHE_ERRORS_TOTAL.inc()
            logger.error(f"Error caching message id {delivery.message_id} for {message.id}: {e}")
            return DispatchOutcome.SENT

        logger.info(f"Message {message.id} sent successfully (provider id {delivery.message_id})")
        return DispatchOutcome.SENT

    async def _deliver(self, message: Message) -> DeliveryResult:
        start_time = time.perf_counter()
        try:
            return await self.client.send(message.recipient, message.content)
        finally:
            DELIVERY_DURATION.observe(time.perf_counter() - start_time)
