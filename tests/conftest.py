"""Pytest configuration and fixtures for msgdispatch tests."""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock

# Set required environment variables before any imports
os.environ.setdefault("MSGDISPATCH_DELIVERY_URL", "https://hooks.example.com/send")
os.environ.setdefault("MSGDISPATCH_DELIVERY_AUTH_KEY", "test-auth-key")
os.environ.setdefault("MSGDISPATCH_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from msgdispatch.config import Settings, clear_settings_cache
from msgdispatch.db.enums import MessageStatus
from msgdispatch.db.models import Base, Message
from msgdispatch.delivery.client import DeliveryResult
from msgdispatch.store.messages import SQLMessageStore
from msgdispatch.worker.dispatcher import DispatchWorker
from msgdispatch.worker.retry import RetryPolicy


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """File-backed SQLite so concurrent sessions see the same data."""
    return f"sqlite+aiosqlite:///{tmp_path / 'msgdispatch.db'}"


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Create test settings with a throwaway SQLite database."""
    clear_settings_cache()
    return Settings(
        database_url=database_url,
        delivery_url="https://hooks.example.com/send",
        delivery_auth_key="test-auth-key",
        redis_url="redis://localhost:6379/15",
        instance_id="test-instance",
        shutdown_sleep_seconds=0,
        seed_enabled=False,
        dispatch_autostart=False,
        dispatch_status_write_delay_ms=0,
    )


@pytest_asyncio.fixture
async def test_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with fresh tables."""
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def message_store(test_engine: AsyncEngine) -> SQLMessageStore:
    """Message store backed by the test engine."""
    return SQLMessageStore(test_engine)


def make_message(
    content: str = "hi",
    recipient: str = "+905551234567",
    status: MessageStatus = MessageStatus.PENDING,
    created_at: datetime | None = None,
) -> Message:
    """Build a transient message with an id and creation time set."""
    return Message(
        id=uuid.uuid4(),
        recipient=recipient,
        content=content,
        status=status.value,
        created_at=created_at or datetime.now(UTC),
    )


@pytest.fixture
def message_factory():
    """Factory for transient messages."""
    return make_message


@pytest.fixture
def mock_store() -> AsyncMock:
    """Message store double returning an empty batch by default."""
    store = AsyncMock()
    store.fetch.return_value = []
    store.count.return_value = 0
    return store


@pytest.fixture
def mock_client() -> AsyncMock:
    """Delivery client double that accepts every message as msg-1."""
    client = AsyncMock()
    client.send.return_value = DeliveryResult(message_id="msg-1", message="Accepted")
    return client


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Dedup cache double."""
    cache = AsyncMock()
    cache.ping.return_value = True
    return cache


@pytest.fixture
def worker(mock_store: AsyncMock, mock_client: AsyncMock, mock_cache: AsyncMock) -> DispatchWorker:
    """Dispatch worker wired to doubles, with a zero-delay retry policy."""
    return DispatchWorker(
        mock_store,
        mock_client,
        mock_cache,
        batch_size=10,
        interval=60.0,
        cycle_timeout=5.0,
        retry_policy=RetryPolicy(max_attempts=3, delay=0),
    )
