"""Message and dispatch control schemas."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from msgdispatch.worker.validation import MAX_CONTENT_LENGTH, content_length


class MessageCreate(BaseModel):
    """Request to queue a new outbound message."""

    recipient: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def validate_content_length(cls, v: str) -> str:
        if content_length(v) > MAX_CONTENT_LENGTH:
            raise ValueError(f"content must be at most {MAX_CONTENT_LENGTH} bytes in UTF-8")
        return v


class MessageResponse(BaseModel):
    """Stored message."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    recipient: str
    content: str
    status: str
    created_at: datetime
    sent_at: datetime | None = None


class SentMessagesResponse(BaseModel):
    """Messages that have been delivered and recorded as sent."""

    messages: list[MessageResponse] = Field(default_factory=list)


class DispatchActionRequest(BaseModel):
    """Start or stop the dispatch worker."""

    action: Literal["start", "stop"]


class DispatchActionResponse(BaseModel):
    """Result of a start or stop request."""

    status: Literal["started", "stopped"]


class WorkerStatusResponse(BaseModel):
    """Whether the dispatch worker is scheduling cycles."""

    running: bool
