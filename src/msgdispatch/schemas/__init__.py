"""API schemas."""

from msgdispatch.schemas.common import ErrorResponse, HealthResponse, ReadyResponse
from msgdispatch.schemas.message import (
    DispatchActionRequest,
    DispatchActionResponse,
    MessageCreate,
    MessageResponse,
    SentMessagesResponse,
    WorkerStatusResponse,
)

__all__ = [
    "DispatchActionRequest",
    "DispatchActionResponse",
    "ErrorResponse",
    "HealthResponse",
    "MessageCreate",
    "MessageResponse",
    "ReadyResponse",
    "SentMessagesResponse",
    "WorkerStatusResponse",
]
