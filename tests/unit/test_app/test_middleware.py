"""Tests for the request id and email failure middleware."""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from httpx import ASGITransport, AsyncClient

from taskboard.app.middleware.email_failures import EmailFailureMiddleware
from taskboard.app.middleware.request_id import RequestIDMiddleware
from taskboard.infra.logging import get_log_context

FAILED = {"id": 9, "email_sent": False, "email_sent_at": None, "email_error": "SMTP down"}
SENT = {"id": 9, "email_sent": True, "email_sent_at": "2026-10-19T12:00:00Z", "email_error": None}
NOT_ATTEMPTED = {"id": 9, "email_sent": False, "email_sent_at": None, "email_error": None}


@pytest.fixture
def mini_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(EmailFailureMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.post("/failed", status_code=201)
    async def failed(request: Request):
        request.state.user_id = 1
        return FAILED

    @app.get("/sent")
    async def sent():
        return SENT

    @app.get("/not-attempted")
    async def not_attempted():
        return NOT_ATTEMPTED

    @app.get("/error")
    async def error():
        return JSONResponse(status_code=500, content=FAILED)

    @app.get("/text")
    async def text():
        return PlainTextResponse('{"email_sent": false, "email_error": "x"}')

    @app.get("/list")
    async def listing():
        return [FAILED]

    @app.get("/context")
    async def context():
        return get_log_context()

    return app


@pytest.fixture
async def mini_client(mini_app):
    async with AsyncClient(transport=ASGITransport(app=mini_app), base_url="http://test") as ac:
        yield ac


class TestEmailFailureMiddleware:
    @pytest.mark.asyncio
    async def test_failure_adds_header_and_logs(self, mini_client, caplog):
        with caplog.at_level(logging.WARNING, logger="taskboard.app.middleware.email_failures"):
            response = await mini_client.post("/failed")

        assert response.status_code == 201
        assert response.json() == FAILED
        assert response.headers["X-Email-Warning"] == "Email notification failed to send"
        assert response.headers["content-type"].startswith("application/json")
        (record,) = caplog.records
        assert record.getMessage() == "Email sending failed in request"
        assert record.email_error == "SMTP down"
        assert record.task_id == 9
        assert record.user_id == 1
        assert record.method == "POST"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/sent", "/not-attempted", "/error", "/text", "/list"])
    async def test_no_header_otherwise(self, mini_client, path):
        response = await mini_client.get(path)

        assert "X-Email-Warning" not in response.headers

    @pytest.mark.asyncio
    async def test_body_and_length_preserved(self, mini_client):
        response = await mini_client.get("/sent")

        assert response.json() == SENT
        assert int(response.headers["content-length"]) == len(response.content)


class TestRequestIDMiddleware:
    @pytest.mark.asyncio
    async def test_generates_id(self, mini_client):
        response = await mini_client.get("/sent")

        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_echoes_given_id_into_log_context(self, mini_client):
        response = await mini_client.get("/context", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["request_id"] == "req-123"
