"""Database enum types for consistent status values."""

from enum import Enum


class MessageStatus(str, Enum):
    """Lifecycle status of an outbound message.

    pending -> sent | failed | invalid
    failed  -> sent | failed | invalid
    sent and invalid are terminal.
    """

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    INVALID = "invalid"


# Statuses the dispatch worker picks up each cycle
DISPATCHABLE_STATUSES = (MessageStatus.PENDING, MessageStatus.FAILED)
