"""msgdispatch main application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from msgdispatch import __version__
from msgdispatch.api.router import api_router
from msgdispatch.config import Settings, get_settings
from msgdispatch.metrics import MetricsMiddleware
from msgdispatch.middleware import RequestLoggingMiddleware
from msgdispatch.service import ServiceComponents, build_components, shutdown, startup


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    if app.state.components is None:
        app.state.components = build_components(settings)

    await startup(app.state.components, settings)
    yield
    await shutdown(app.state.components, settings)


def create_app(
    settings: Settings | None = None,
    components: ServiceComponents | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing. If not provided,
                  default settings will be loaded from environment.
        components: Optional prebuilt components (store, cache, client, worker).
                    Built from settings at startup when omitted.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="msgdispatch",
        description="Scheduled outbound message dispatcher",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.components = components

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(MetricsMiddleware)

    app.include_router(api_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose Prometheus metrics."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
        )

    return app


def create_default_app() -> FastAPI:
    """Application factory used by uvicorn (``--factory``)."""
    return create_app()
