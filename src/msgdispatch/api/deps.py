"""FastAPI dependencies resolving shared service components."""

from fastapi import Request

from msgdispatch.health import HealthState
from msgdispatch.service import ServiceComponents
from msgdispatch.store.messages import MessageStore
from msgdispatch.worker.dispatcher import DispatchWorker


def get_components(request: Request) -> ServiceComponents:
    return request.app.state.components


def get_store(request: Request) -> MessageStore:
    return get_components(request).store


def get_worker(request: Request) -> DispatchWorker:
    return get_components(request).worker


def get_health(request: Request) -> HealthState:
    return get_components(request).health
