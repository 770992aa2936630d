"""Tests for DispatchService."""

from __future__ import annotations

import asyncio
import json
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from taskboard.core.settings.queue import QueueSettings
from taskboard.features.notifications.policy import TASK_ASSIGNED_JOB
from taskboard.features.notifications.results import NO_EMAIL_ERROR, DeliveryResult
from taskboard.infra.queue.policy import RetryPolicy

DISPATCH_LOGGER = "taskboard.features.notifications.dispatch"


@pytest.fixture
def user() -> SimpleNamespace:
    return SimpleNamespace(id=2, name="John Doe", email="john@example.com")


@pytest.fixture
def task() -> SimpleNamespace:
    return SimpleNamespace(
        id=9, title="Write report", description="Quarterly numbers", status="pending", deadline=None
    )


def dispatch_records(caplog, level: int) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == DISPATCH_LOGGER and r.levelno == level]


class TestInlineDelivery:
    @pytest.mark.asyncio
    async def test_success_logs_once(self, make_dispatcher, executor, fallback, user, task, caplog):
        with caplog.at_level(logging.INFO, logger=DISPATCH_LOGGER):
            result = await make_dispatcher().send_assignment(user, task)

        assert result.success is True
        executor.attempt.assert_awaited_once()
        fallback.notify_fallback.assert_not_awaited()
        infos = dispatch_records(caplog, logging.INFO)
        assert [r.getMessage() for r in infos] == ["Task assignment email sent successfully"]
        assert infos[0].task_id == 9
        assert infos[0].user_email == "john@example.com"

    @pytest.mark.asyncio
    async def test_failure_logs_error_and_falls_back(
        self, make_dispatcher, executor, fallback, user, task, caplog
    ):
        executor.attempt.return_value = DeliveryResult.failed("SMTP error: 451 try later")

        with caplog.at_level(logging.INFO, logger=DISPATCH_LOGGER):
            result = await make_dispatcher().send_assignment(user, task)

        assert result.success is False
        assert result.error == "SMTP error: 451 try later"
        errors = dispatch_records(caplog, logging.ERROR)
        assert len(errors) == 1
        assert errors[0].getMessage() == "Failed to send task assignment email"
        assert errors[0].task_id == 9
        assert errors[0].user_id == 2
        assert errors[0].user_email == "john@example.com"
        assert errors[0].error == "SMTP error: 451 try later"
        fallback.notify_fallback.assert_awaited_once_with(user, task, "SMTP error: 451 try later")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "   ", None])
    async def test_missing_email_skips_transport(
        self, make_dispatcher, executor, fallback, task, email
    ):
        user = SimpleNamespace(id=3, name="Nobody", email=email)

        result = await make_dispatcher().send_assignment(user, task)

        assert result.success is False
        assert result.error == NO_EMAIL_ERROR
        executor.attempt.assert_not_awaited()
        fallback.notify_fallback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_executor_exception_becomes_failure(self, make_dispatcher, executor, user, task):
        executor.attempt.side_effect = RuntimeError("renderer exploded")

        result = await make_dispatcher().send_assignment(user, task)

        assert result.success is False
        assert result.error == "renderer exploded"

    @pytest.mark.asyncio
    async def test_slow_attempt_times_out(self, make_dispatcher, executor, user, task, monkeypatch):
        monkeypatch.setattr(
            "taskboard.features.notifications.dispatch.TASK_ASSIGNED_POLICY",
            RetryPolicy(max_attempts=3, backoff=(60, 180, 360), timeout=0.05),
        )

        async def slow(record):
            await asyncio.sleep(5)
            return DeliveryResult.sent()

        executor.attempt.side_effect = slow

        result = await make_dispatcher().send_assignment(user, task)

        assert result.success is False
        assert result.error == "Email delivery timed out after 0.05 seconds"

    @pytest.mark.asyncio
    async def test_fallback_error_is_logged_not_raised(
        self, make_dispatcher, executor, fallback, user, task, caplog
    ):
        executor.attempt.return_value = DeliveryResult.failed("boom")
        fallback.notify_fallback.side_effect = RuntimeError("sms gateway down")

        with caplog.at_level(logging.INFO, logger=DISPATCH_LOGGER):
            result = await make_dispatcher().send_assignment(user, task)

        assert result.error == "boom"
        messages = [r.getMessage() for r in dispatch_records(caplog, logging.ERROR)]
        assert messages == [
            "Failed to send task assignment email",
            "Fallback notification also failed",
        ]

    @pytest.mark.asyncio
    async def test_reassignment_wording(self, make_dispatcher, executor, user, task, caplog):
        executor.attempt.return_value = DeliveryResult.failed("nope")

        with caplog.at_level(logging.INFO, logger=DISPATCH_LOGGER):
            await make_dispatcher().send_reassignment(user, task, previous_owner_id=5)

        (error,) = dispatch_records(caplog, logging.ERROR)
        assert error.getMessage() == "Failed to send task reassignment email"
        assert error.previous_user_id == 5
        record = executor.attempt.await_args.args[0]
        assert record.previous_owner_id == 5


class TestQueuedDelivery:
    @pytest.mark.asyncio
    async def test_push_counts_as_success(self, make_dispatcher, executor, queue_store, user, task):
        dispatcher = make_dispatcher(queue_settings=QueueSettings(driver="database"))

        result = await dispatcher.send_assignment(user, task)

        assert result.success is True
        assert result.sent_at is not None
        executor.attempt.assert_not_awaited()
        (job,) = await queue_store.list_pending(TASK_ASSIGNED_JOB)
        assert job.queue == "default"
        payload = json.loads(job.payload)
        assert payload["task"]["id"] == 9
        assert payload["recipient"]["email"] == "john@example.com"

    @pytest.mark.asyncio
    async def test_push_failure_is_reported(self, make_dispatcher, fallback, user, task):
        dispatcher = make_dispatcher(queue_settings=QueueSettings(driver="database"))
        dispatcher.store = MagicMock(push=AsyncMock(side_effect=RuntimeError("database is locked")))

        result = await dispatcher.send_assignment(user, task)

        assert result.success is False
        assert result.error == "database is locked"
        fallback.notify_fallback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_email_is_not_queued(self, make_dispatcher, queue_store, task):
        dispatcher = make_dispatcher(queue_settings=QueueSettings(driver="database"))

        result = await dispatcher.send_assignment(SimpleNamespace(id=3, name="N", email=""), task)

        assert result.error == NO_EMAIL_ERROR
        assert await queue_store.count_pending() == 0


def test_email_status(make_dispatcher):
    status = make_dispatcher().email_status()

    assert status == {
        "configured": True,
        "driver": "console",
        "from_address": "tasks@example.com",
        "from_name": "Taskboard",
        "queue_enabled": False,
    }


class TestSingleDeliveryEvent:
    """With a real executor and transport only the dispatcher reports the outcome."""

    @pytest.fixture
    def file_dispatcher(
        self, queue_store, fallback, email_settings, sync_queue_settings, tmp_path
    ):
        from taskboard.core.settings.app import AppSettings
        from taskboard.core.settings.email import EmailSettings
        from taskboard.features.notifications.dispatch import DispatchService
        from taskboard.features.notifications.executor import DeliveryAttemptExecutor
        from taskboard.infra.email import EmailTemplateRenderer
        from taskboard.infra.email.providers.file import FileProvider

        provider = FileProvider(EmailSettings(backend="file", file_path=str(tmp_path)))
        executor = DeliveryAttemptExecutor(
            provider=provider,
            renderer=EmailTemplateRenderer(email_settings),
            app_settings=AppSettings(base_url="https://tasks.example.com"),
            email_settings=email_settings,
        )
        dispatcher = DispatchService(
            executor,
            queue_store,
            fallback=fallback,
            queue_settings=sync_queue_settings,
            email_settings=email_settings,
        )
        return provider, dispatcher

    @staticmethod
    def reported(caplog) -> list[logging.LogRecord]:
        return [
            r for r in caplog.records if r.name.startswith("taskboard") and r.levelno >= logging.INFO
        ]

    @pytest.mark.asyncio
    async def test_success_is_one_info_event(self, file_dispatcher, user, task, caplog):
        _, dispatcher = file_dispatcher

        with caplog.at_level(logging.INFO, logger="taskboard"):
            result = await dispatcher.dispatch(user, task)

        assert result.success is True
        (record,) = self.reported(caplog)
        assert record.name == DISPATCH_LOGGER
        assert record.levelno == logging.INFO

    @pytest.mark.asyncio
    async def test_transport_failure_is_one_error_event(
        self, file_dispatcher, user, task, caplog, monkeypatch
    ):
        provider, dispatcher = file_dispatcher
        monkeypatch.setattr(provider, "_write", MagicMock(side_effect=OSError("disk full")))

        with caplog.at_level(logging.INFO, logger="taskboard"):
            result = await dispatcher.dispatch(user, task)

        assert result.success is False
        (record,) = self.reported(caplog)
        assert record.name == DISPATCH_LOGGER
        assert record.levelno == logging.ERROR
        assert "disk full" in record.error
