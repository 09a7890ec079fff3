"""Database module."""

from msgdispatch.db.enums import DISPATCHABLE_STATUSES, MessageStatus
from msgdispatch.db.models import Base, Message
from msgdispatch.db.session import create_engine, init_models, make_session_factory

__all__ = [
    "Base",
    "DISPATCHABLE_STATUSES",
    "Message",
    "MessageStatus",
    "create_engine",
    "init_models",
    "make_session_factory",
]
