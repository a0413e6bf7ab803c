"""Main application entrypoint for the TSDB JSON decoder."""

import os

from fastapi import FastAPI

from tsdbjson.api.middleware import HTTPErrorLoggingMiddleware
from tsdbjson.api.v1 import routes_events, routes_health
from tsdbjson.core.config import settings
from tsdbjson.core.logging import setup_logging


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        description="Decodes time-series database storage objects into JSON",
        version=settings.SERVICE_VERSION,
    )

    app.add_middleware(HTTPErrorLoggingMiddleware)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_events.router, tags=["events"])

    return app


# Export app instance for ASGI servers
app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(app, host="0.0.0.0", port=port)
