"""Dispatch worker module."""

from msgdispatch.worker.dispatcher import CycleResult, DispatchOutcome, DispatchWorker
from msgdispatch.worker.retry import RetryExhaustedError, RetryPolicy
from msgdispatch.worker.validation import MAX_CONTENT_LENGTH, is_valid_message

__all__ = [
    "CycleResult",
    "DispatchOutcome",
    "DispatchWorker",
    "MAX_CONTENT_LENGTH",
    "RetryExhaustedError",
    "RetryPolicy",
    "is_valid_message",
]
