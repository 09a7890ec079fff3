"""Message and dispatch control endpoints."""

import logging
import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status

from msgdispatch.api.deps import get_store, get_worker
from msgdispatch.db.enums import MessageStatus
from msgdispatch.db.models import Message
from msgdispatch.schemas import (
    DispatchActionRequest,
    DispatchActionResponse,
    MessageCreate,
    MessageResponse,
    SentMessagesResponse,
    WorkerStatusResponse,
)
from msgdispatch.store.messages import MessageStore
from msgdispatch.worker.dispatcher import DispatchWorker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


@router.post("/start-stop-sending", response_model=DispatchActionResponse)
async def start_stop_sending(
    data: DispatchActionRequest,
    worker: DispatchWorker = Depends(get_worker),
) -> DispatchActionResponse:
    """Start or stop automatic message sending."""
    if data.action == "start":
        worker.start()
        return DispatchActionResponse(status="started")

    worker.stop()
    return DispatchActionResponse(status="stopped")


@router.get("/start-stop-sending", response_model=WorkerStatusResponse)
async def sending_status(
    worker: DispatchWorker = Depends(get_worker),
) -> WorkerStatusResponse:
    """Report whether automatic message sending is running."""
    return WorkerStatusResponse(running=worker.running)


@router.get("/retrieve-sent-messages", response_model=SentMessagesResponse)
async def retrieve_sent_messages(
    store: MessageStore = Depends(get_store),
) -> SentMessagesResponse:
    """List messages recorded as sent, oldest first."""
    try:
        messages = await store.fetch([MessageStatus.SENT])
    except Exception as e:
        logger.error(f"Error retrieving sent messages: {e}")
        return SentMessagesResponse()

    return SentMessagesResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
    )


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    data: MessageCreate,
    store: MessageStore = Depends(get_store),
) -> MessageResponse:
    """Queue a new message for the next dispatch cycle."""
    message = Message(
        id=uuid.uuid4(),
        recipient=data.recipient,
        content=data.content,
        status=MessageStatus.PENDING.value,
        created_at=datetime.now(UTC),
    )
    await store.insert_many([message])
    logger.info(f"Queued message {message.id}")
    return MessageResponse.model_validate(message)
