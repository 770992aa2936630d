"""HTTP middleware and its registration order."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from taskboard.app.middleware.email_failures import EmailFailureMiddleware
from taskboard.app.middleware.request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from taskboard.core.settings import Settings

logger = logging.getLogger(__name__)


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Register middleware. The last one added runs outermost.

    Order, outermost first: CORS, request id, email failure inspection.
    """
    app.add_middleware(EmailFailureMiddleware)
    app.add_middleware(RequestIDMiddleware)

    cors_origins = settings.app.cors_origins
    if cors_origins:
        logger.info("Configuring CORS", extra={"origins": cors_origins})
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=settings.app.cors_allow_credentials,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Email-Warning"],
        )


__all__ = ["EmailFailureMiddleware", "RequestIDMiddleware", "configure_middleware"]
