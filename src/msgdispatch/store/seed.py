"""Demo data seeding for fresh deployments."""

import logging
from datetime import UTC, datetime, timedelta

from msgdispatch.db.enums import MessageStatus
from msgdispatch.db.models import Message
from msgdispatch.store.messages import MessageStore

logger = logging.getLogger(__name__)


def build_seed_messages(count: int, recipient: str) -> list[Message]:
    """Build pending demo messages with strictly increasing creation times."""
    now = datetime.now(UTC)
    return [
        Message(
            recipient=recipient,
            content=f"Auto generated message {i}",
            status=MessageStatus.PENDING.value,
            created_at=now + timedelta(microseconds=i),
        )
        for i in range(count)
    ]


async def seed_messages(
    store: MessageStore,
    target: int,
    count: int = 20,
    recipient: str = "+905551111111",
    force: bool = False,
) -> int:
    """Top up the pending queue with demo messages.

    Seeding only happens when fewer than ``target`` messages are pending
    (unless ``force`` is set). Failures are logged and reported as zero
    inserted so that startup can continue.

    Returns:
        Number of messages inserted
    """
    try:
        if not force:
            pending = await store.count([MessageStatus.PENDING])
            if pending >= target:
                logger.info(f"Found {pending} pending messages, seeding not needed")
                return 0
            logger.info(f"Seeding messages (pending: {pending}, target: {target})")

        await store.insert_many(build_seed_messages(count, recipient))
    except Exception:
        logger.exception("Seeding messages failed")
        return 0

    logger.info(f"Seeded {count} messages")
    return count
