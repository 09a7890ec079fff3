"""Main API router combining all endpoints."""

from fastapi import APIRouter

from msgdispatch.api import messages, operations

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(operations.router)
api_router.include_router(messages.router)
