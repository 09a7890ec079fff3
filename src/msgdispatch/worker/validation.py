"""Pre-send checks for outbound messages."""

from msgdispatch.db.models import Message

# Measured in UTF-8 bytes
MAX_CONTENT_LENGTH = 1000


def content_length(content: str | None) -> int:
    """Length of message content in UTF-8 bytes."""
    return len((content or "").encode("utf-8"))


def is_valid_message(message: Message) -> bool:
    """A message can be sent if it has a recipient and 1..1000 bytes of content."""
    return bool(message.recipient) and 0 < content_length(message.content) <= MAX_CONTENT_LENGTH
