"""Message storage."""

from msgdispatch.store.messages import MessageStore, SQLMessageStore
from msgdispatch.store.seed import build_seed_messages, seed_messages

__all__ = [
    "MessageStore",
    "SQLMessageStore",
    "build_seed_messages",
    "seed_messages",
]
