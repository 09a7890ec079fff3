"""Database-backed message store."""

import asyncio
import logging
import uuid
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncEngine

from msgdispatch.config import Settings
from msgdispatch.db.enums import MessageStatus
from msgdispatch.db.models import Message
from msgdispatch.db.session import create_engine, make_session_factory

logger = logging.getLogger(__name__)


class MessageStore(Protocol):
    """Operations the dispatch worker and service layer need from message storage."""

    async def fetch(
        self,
        statuses: Iterable[MessageStatus],
        limit: int | None = None,
    ) -> list[Message]: ...

    async def update_status(
        self,
        message_id: uuid.UUID,
        status: MessageStatus,
        sent_at: datetime | None = None,
    ) -> None: ...

    async def count(self, statuses: Iterable[MessageStatus]) -> int: ...

    async def insert_many(self, messages: Sequence[Message]) -> None: ...

    async def close(self) -> None: ...


def _status_values(statuses: Iterable[MessageStatus]) -> list[str]:
    return [MessageStatus(s).value for s in statuses]


class SQLMessageStore:
    """Message store on top of an async SQLAlchemy engine.

    Every call opens its own short-lived session, so concurrent dispatch units
    never share session state. Reads and writes are bounded by their own
    timeouts on top of whatever deadline the caller applies.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        read_timeout: float = 10.0,
        write_timeout: float = 5.0,
    ):
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLMessageStore":
        return cls(
            create_engine(settings),
            read_timeout=settings.database_read_timeout,
            write_timeout=settings.database_write_timeout,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def fetch(
        self,
        statuses: Iterable[MessageStatus],
        limit: int | None = None,
    ) -> list[Message]:
        """Get messages in any of the given statuses, oldest first.

        Args:
            statuses: Statuses to match. Empty means no status filter.
            limit: Maximum number of messages. None or <= 0 means unbounded.

        Returns:
            Messages ordered by creation time ascending
        """
        stmt = select(Message).order_by(Message.created_at, Message.id)
        values = _status_values(statuses)
        if values:
            stmt = stmt.where(Message.status.in_(values))
        if limit is not None and limit > 0:
            stmt = stmt.limit(limit)

        async with asyncio.timeout(self.read_timeout):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

    async def update_status(
        self,
        message_id: uuid.UUID,
        status: MessageStatus,
        sent_at: datetime | None = None,
    ) -> None:
        """Set the status of a single message.

        Raises:
            ValueError: If sent_at is given for a non-sent status or missing for sent.
        """
        status = MessageStatus(status)
        if (status == MessageStatus.SENT) != (sent_at is not None):
            raise ValueError(f"sent_at must be set if and only if status is sent (got {status.value})")

        stmt = (
            update(Message)
            .where(Message.id == message_id)
            .values(
                status=status.value,
                sent_at=sent_at,
                updated_at=datetime.now(UTC),  # Explicit update since onupdate doesn't trigger
            )
        )

        async with asyncio.timeout(self.write_timeout):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()

        if result.rowcount == 0:
            logger.warning(f"Message {message_id} not found while setting status {status.value}")

    async def count(self, statuses: Iterable[MessageStatus]) -> int:
        """Count messages in any of the given statuses."""
        stmt = select(func.count()).select_from(Message)
        values = _status_values(statuses)
        if values:
            stmt = stmt.where(Message.status.in_(values))

        async with asyncio.timeout(self.read_timeout):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar() or 0

    async def insert_many(self, messages: Sequence[Message]) -> None:
        """Insert new messages in a single transaction."""
        if not messages:
            return

        async with asyncio.timeout(self.write_timeout):
            async with self._session_factory() as session:
                session.add_all(messages)
                await session.commit()

        logger.debug(f"Inserted {len(messages)} messages")

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        await self._engine.dispose()
