"""Router tests for the tasks API."""

from __future__ import annotations

import pytest

from taskboard.features.notifications.results import NO_EMAIL_ERROR, DeliveryResult


@pytest.fixture
def create_task(client, admin, as_user):
    """POST a task as the admin and return the response body."""

    async def _create(owner, **fields) -> dict:
        body = {"title": "Write report", "description": "Quarterly numbers", "user_id": owner.id}
        body.update(fields)
        response = await client.post("/api/tasks", json=body, headers=as_user(admin))
        assert response.status_code == 201, response.text
        return response.json()

    return _create


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_creates_pending_task_and_notifies(
        self, client, admin, john, as_user, executor
    ):
        response = await client.post(
            "/api/tasks",
            json={
                "title": "Write report",
                "description": "Quarterly numbers",
                "user_id": john.id,
                "deadline": "2026-11-01T12:00:00Z",
                "status": "completed",
            },
            headers=as_user(admin),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["user_id"] == john.id
        assert data["user"]["email"] == "john@example.com"
        assert data["email_sent"] is True
        assert data["email_sent_at"] is not None
        assert data["email_error"] is None
        assert "X-Email-Warning" not in response.headers
        record = executor.attempt.await_args.args[0]
        assert record.recipient.id == john.id
        assert record.task.id == data["id"]

    @pytest.mark.asyncio
    async def test_email_failure_still_creates_task(
        self, client, admin, john, as_user, executor, fallback
    ):
        executor.attempt.return_value = DeliveryResult.failed("SMTP error: 451 try later")

        response = await client.post(
            "/api/tasks",
            json={"title": "Write report", "description": "Numbers", "user_id": john.id},
            headers=as_user(admin),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email_sent"] is False
        assert data["email_sent_at"] is None
        assert data["email_error"] == "SMTP error: 451 try later"
        assert response.headers["X-Email-Warning"] == "Email notification failed to send"
        fallback.notify_fallback.assert_awaited_once()

        listed = await client.get("/api/tasks", headers=as_user(admin))
        assert [task["id"] for task in listed.json()] == [data["id"]]

    @pytest.mark.asyncio
    async def test_owner_without_email(self, client, admin, no_email_user, as_user, executor):
        response = await client.post(
            "/api/tasks",
            json={"title": "T", "description": "D", "user_id": no_email_user.id},
            headers=as_user(admin),
        )

        assert response.status_code == 201
        assert response.json()["email_error"] == NO_EMAIL_ERROR
        executor.attempt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_owner_is_rejected(self, client, admin, as_user, executor):
        response = await client.post(
            "/api/tasks",
            json={"title": "T", "description": "D", "user_id": 999},
            headers=as_user(admin),
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "The selected user id is invalid."
        executor.attempt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_fields_are_validation_errors(self, client, admin, as_user):
        response = await client.post(
            "/api/tasks", json={"title": ""}, headers=as_user(admin)
        )

        assert response.status_code == 422
        data = response.json()
        assert data["type"] == "validation-error"
        fields = {error["field"] for error in data["errors"]}
        assert {"body.title", "body.description", "body.user_id"} <= fields

    @pytest.mark.asyncio
    async def test_non_admin_cannot_create(self, client, john, as_user):
        response = await client.post(
            "/api/tasks",
            json={"title": "T", "description": "D", "user_id": john.id},
            headers=as_user(john),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_identity_header_required(self, client, john):
        response = await client.post(
            "/api/tasks", json={"title": "T", "description": "D", "user_id": john.id}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing X-User-Id header"

    @pytest.mark.asyncio
    async def test_unknown_identity_rejected(self, client):
        response = await client.get("/api/tasks", headers={"X-User-Id": "4242"})

        assert response.status_code == 401


class TestReadTasks:
    @pytest.mark.asyncio
    async def test_visibility(self, client, admin, john, jane, as_user, create_task):
        johns = await create_task(john)
        janes = await create_task(jane, title="Other")

        as_admin = await client.get("/api/tasks", headers=as_user(admin))
        as_john = await client.get("/api/tasks", headers=as_user(john))
        my_john = await client.get("/api/tasks/my", headers=as_user(john))

        assert {t["id"] for t in as_admin.json()} == {johns["id"], janes["id"]}
        assert [t["id"] for t in as_john.json()] == [johns["id"]]
        assert [t["id"] for t in my_john.json()] == [johns["id"]]

    @pytest.mark.asyncio
    async def test_get_single_task(self, client, john, jane, as_user, create_task):
        task = await create_task(john)

        own = await client.get(f"/api/tasks/{task['id']}", headers=as_user(john))
        other = await client.get(f"/api/tasks/{task['id']}", headers=as_user(jane))
        missing = await client.get("/api/tasks/999", headers=as_user(john))

        assert own.status_code == 200
        assert own.json()["title"] == "Write report"
        assert other.status_code == 403
        assert other.json()["detail"] == "Unauthorized"
        assert missing.status_code == 404
        assert missing.json()["type"] == "task-not-found"


class TestUpdateTask:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["PUT", "PATCH"])
    async def test_owner_moves_status(self, client, john, as_user, create_task, executor, method):
        task = await create_task(john)
        executor.attempt.reset_mock()

        response = await client.request(
            method,
            f"/api/tasks/{task['id']}",
            json={"status": "in_progress"},
            headers=as_user(john),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "in_progress"
        assert data["email_sent"] is False
        assert data["email_error"] is None
        assert "X-Email-Warning" not in response.headers
        executor.attempt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owner_must_send_status(self, client, john, as_user, create_task):
        task = await create_task(john)

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"title": "Sneaky"}, headers=as_user(john)
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "The status field is required."

    @pytest.mark.asyncio
    async def test_invalid_status_rejected(self, client, john, as_user, create_task):
        task = await create_task(john)

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"status": "archived"}, headers=as_user(john)
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(self, client, john, jane, as_user, create_task):
        task = await create_task(john)

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=as_user(jane)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_change_status(self, client, admin, john, as_user, create_task):
        task = await create_task(john)

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=as_user(admin)
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Admins cannot update task status"

    @pytest.mark.asyncio
    async def test_admin_edits_fields_without_notifying(
        self, client, admin, john, as_user, create_task, executor
    ):
        task = await create_task(john, deadline="2026-11-01T12:00:00Z")
        executor.attempt.reset_mock()

        response = await client.patch(
            f"/api/tasks/{task['id']}",
            json={"title": "Final report", "deadline": None, "user_id": john.id},
            headers=as_user(admin),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Final report"
        assert data["description"] == "Quarterly numbers"
        assert data["deadline"] is None
        assert data["email_sent"] is False
        executor.attempt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reassignment_notifies_new_owner(
        self, client, admin, john, jane, as_user, create_task, executor
    ):
        task = await create_task(john)
        executor.attempt.reset_mock()

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"user_id": jane.id}, headers=as_user(admin)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == jane.id
        assert data["user"]["name"] == "Jane Smith"
        assert data["email_sent"] is True
        record = executor.attempt.await_args.args[0]
        assert record.recipient.email == "jane@example.com"
        assert record.previous_owner_id == john.id

    @pytest.mark.asyncio
    async def test_reassignment_failure_sets_warning(
        self, client, admin, john, jane, as_user, create_task, executor
    ):
        task = await create_task(john)
        executor.attempt.return_value = DeliveryResult.failed("Connection refused")

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"user_id": jane.id}, headers=as_user(admin)
        )

        assert response.status_code == 200
        assert response.json()["email_error"] == "Connection refused"
        assert response.json()["user_id"] == jane.id
        assert response.headers["X-Email-Warning"] == "Email notification failed to send"

    @pytest.mark.asyncio
    async def test_reassignment_to_unknown_user(self, client, admin, john, as_user, create_task):
        task = await create_task(john)

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"user_id": 999}, headers=as_user(admin)
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "The selected user id is invalid."

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, client, admin, john, as_user, create_task):
        task = await create_task(john)

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"title": None}, headers=as_user(admin)
        )

        assert response.status_code == 422
        assert response.json()["type"] == "validation-error"

    @pytest.mark.asyncio
    async def test_update_missing_task(self, client, admin, as_user):
        response = await client.put("/api/tasks/999", json={"title": "x"}, headers=as_user(admin))

        assert response.status_code == 404


class TestDeleteTask:
    @pytest.mark.asyncio
    async def test_admin_deletes(self, client, admin, john, as_user, create_task):
        task = await create_task(john)

        response = await client.delete(f"/api/tasks/{task['id']}", headers=as_user(admin))

        assert response.status_code == 200
        assert response.json() == {"message": "Task deleted successfully"}
        gone = await client.get(f"/api/tasks/{task['id']}", headers=as_user(admin))
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_cannot_delete(self, client, john, as_user, create_task):
        task = await create_task(john)

        response = await client.delete(f"/api/tasks/{task['id']}", headers=as_user(john))

        assert response.status_code == 403
