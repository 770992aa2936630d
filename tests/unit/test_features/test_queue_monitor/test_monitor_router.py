"""Router tests for the email status and queue endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from taskboard.features.notifications.policy import TASK_ASSIGNED_JOB

PAYLOAD = {
    "recipient": {"id": 2, "name": "John Doe", "email": "john@example.com"},
    "task": {"id": 9, "title": "Write report", "description": "D", "status": "pending"},
}


async def fail_one(store) -> int:
    await store.push(TASK_ASSIGNED_JOB, PAYLOAD)
    claimed = await store.claim()
    return await store.fail(claimed, "SMTP error: 451 try later")


class TestEmailStatus:
    @pytest.mark.asyncio
    async def test_admin_sees_configuration(self, client, admin, as_user):
        response = await client.get("/api/email-status", headers=as_user(admin))

        assert response.status_code == 200
        assert response.json() == {
            "configured": True,
            "driver": "console",
            "from_address": "tasks@example.com",
            "from_name": "Taskboard",
            "queue_enabled": False,
        }

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(self, client, john, as_user):
        response = await client.get("/api/email-status", headers=as_user(john))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_unauthorized(self, client):
        response = await client.get("/api/email-status")

        assert response.status_code == 401


class TestQueueEndpoints:
    @pytest.mark.asyncio
    async def test_stats(self, client, admin, as_user, queue_store):
        await queue_store.push(TASK_ASSIGNED_JOB, PAYLOAD)
        await fail_one(queue_store)

        response = await client.get("/api/queue/stats", headers=as_user(admin))

        assert response.status_code == 200
        data = response.json()
        assert data["pending_jobs"] == 1
        assert data["email_jobs"] == 1
        assert data["failed_email_jobs"] == 1

    @pytest.mark.asyncio
    async def test_stats_cached_between_requests(self, client, admin, as_user, queue_store):
        first = await client.get("/api/queue/stats", headers=as_user(admin))
        await queue_store.push(TASK_ASSIGNED_JOB, PAYLOAD)
        second = await client.get("/api/queue/stats", headers=as_user(admin))

        assert second.json() == first.json()

    @pytest.mark.asyncio
    async def test_pending_emails(self, client, admin, as_user, queue_store):
        job_id = await queue_store.push(TASK_ASSIGNED_JOB, PAYLOAD)

        response = await client.get("/api/queue/pending-emails", headers=as_user(admin))

        assert response.status_code == 200
        (job,) = response.json()
        assert job["id"] == job_id
        assert job["task_id"] == 9
        assert job["recipient_email"] == "john@example.com"
        assert job["attempts"] == 0

    @pytest.mark.asyncio
    async def test_limit_is_bounded(self, client, admin, as_user):
        response = await client.get(
            "/api/queue/pending-emails", params={"limit": 500}, headers=as_user(admin)
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_failed_emails(self, client, admin, as_user, queue_store):
        failed_id = await fail_one(queue_store)

        response = await client.get("/api/queue/failed-emails", headers=as_user(admin))

        (job,) = response.json()
        assert job["id"] == failed_id
        assert job["exception"] == "SMTP error: 451 try later"
        assert job["task_id"] == 9

    @pytest.mark.asyncio
    async def test_retry(self, client, admin, as_user, queue_store):
        failed_id = await fail_one(queue_store)

        response = await client.post(f"/api/queue/retry/{failed_id}", headers=as_user(admin))

        assert response.status_code == 200
        assert response.json() == {"message": "Job retry initiated successfully"}
        assert await queue_store.count_failed() == 0
        assert await queue_store.count_pending(TASK_ASSIGNED_JOB) == 1

    @pytest.mark.asyncio
    async def test_retry_refreshes_cached_stats(self, client, admin, as_user, queue_store):
        failed_id = await fail_one(queue_store)
        before = await client.get("/api/queue/stats", headers=as_user(admin))

        await client.post(f"/api/queue/retry/{failed_id}", headers=as_user(admin))
        after = await client.get("/api/queue/stats", headers=as_user(admin))

        assert before.json()["failed_email_jobs"] == 1
        assert after.json()["failed_email_jobs"] == 0

    @pytest.mark.asyncio
    async def test_retry_unknown_job(self, client, admin, as_user):
        response = await client.post("/api/queue/retry/999", headers=as_user(admin))

        assert response.status_code == 404
        assert response.json()["type"] == "failed-job-not-found"

    @pytest.mark.asyncio
    async def test_retry_documents_not_found(self, app):
        operation = app.openapi()["paths"]["/api/queue/retry/{job_id}"]["post"]

        assert "404" in operation["responses"]
        assert "Returns 404" in operation["description"]

    @pytest.mark.asyncio
    async def test_retry_store_failure(self, app, client, admin, as_user):
        app.state.test_monitor.store.retry_failed = AsyncMock(side_effect=RuntimeError("locked"))

        response = await client.post("/api/queue/retry/1", headers=as_user(admin))

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to retry job: locked"

    @pytest.mark.asyncio
    async def test_clear_failed(self, client, admin, as_user, queue_store):
        await fail_one(queue_store)

        response = await client.delete("/api/queue/failed-jobs", headers=as_user(admin))

        assert response.status_code == 200
        assert response.json() == {"message": "All failed jobs cleared successfully"}
        assert await queue_store.count_failed() == 0

    @pytest.mark.asyncio
    async def test_regular_user_cannot_clear(self, client, john, as_user):
        response = await client.delete("/api/queue/failed-jobs", headers=as_user(john))

        assert response.status_code == 403
