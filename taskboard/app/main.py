"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from taskboard.app.exception_handlers import configure_exception_handlers
from taskboard.app.lifespan import lifespan
from taskboard.app.middleware import configure_middleware
from taskboard.app.router import setup_routers
from taskboard.core.settings import get_settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Exception handlers first so middleware errors are rendered too
    configure_exception_handlers(app)
    configure_middleware(app, settings)
    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
