"""Service health flag shared between lifespan hooks and the HTTP layer."""

import threading


class HealthState:
    """Explicit, per-application health flag.

    Flipped to healthy once startup completes and back to unhealthy at the
    start of shutdown draining. Independent of dispatch worker state.
    """

    def __init__(self, healthy: bool = False):
        self._lock = threading.Lock()
        self._healthy = healthy

    def set_status(self, healthy: bool) -> None:
        with self._lock:
            self._healthy = healthy

    def is_healthy(self) -> bool:
        with self._lock:
            return self._healthy
