"""Flags responses whose task notification could not be delivered.

Task endpoints always succeed when the task itself was saved; the email
outcome travels in the body. This middleware surfaces a failed delivery
to operators (a warning log) and to clients (``X-Email-Warning``) without
touching the status code or the body.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint
    from starlette.requests import Request

logger = logging.getLogger(__name__)

EMAIL_WARNING_HEADER = "X-Email-Warning"
EMAIL_WARNING_VALUE = "Email notification failed to send"
INSPECTED_STATUS_CODES = frozenset({200, 201})


def _email_failure(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    if payload.get("email_sent") is False and payload.get("email_error") is not None:
        return payload
    return None


class EmailFailureMiddleware(BaseHTTPMiddleware):
    """Inspect successful JSON responses for ``email_sent: false``."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        content_type = response.headers.get("content-type", "")
        if (
            response.status_code not in INSPECTED_STATUS_CODES
            or not content_type.startswith("application/json")
        ):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])  # type: ignore[attr-defined]

        try:
            payload = json.loads(body) if body else None
        except ValueError:
            payload = None

        rebuilt = Response(
            content=body,
            status_code=response.status_code,
            background=response.background,
        )
        rebuilt.raw_headers = list(response.raw_headers)

        failure = _email_failure(payload)
        if failure is not None:
            logger.warning(
                "Email sending failed in request",
                extra={
                    "url": str(request.url),
                    "method": request.method,
                    "user_id": getattr(request.state, "user_id", None),
                    "email_error": failure["email_error"],
                    "task_id": failure.get("id"),
                },
            )
            rebuilt.headers[EMAIL_WARNING_HEADER] = EMAIL_WARNING_VALUE

        return rebuilt
