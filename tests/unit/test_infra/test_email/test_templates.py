"""Tests for Jinja2 email template rendering."""

from __future__ import annotations

import pytest

from taskboard.core.settings.email import EmailSettings
from taskboard.infra.email import EmailTemplateRenderer, TemplateNotFoundError


@pytest.fixture
def renderer() -> EmailTemplateRenderer:
    return EmailTemplateRenderer(EmailSettings(backend="console"))


@pytest.fixture
def context() -> dict:
    return {
        "app_name": "Taskboard",
        "greeting": "Hello Ada!",
        "intro": "A new task has been assigned to you.",
        "lines": ["Task: Write report", "Status: Pending"],
        "action_text": "View Task",
        "action_url": "http://localhost:8000/dashboard",
        "outro": "Please log in to your dashboard to view and update this task.",
    }


def test_task_assigned_renders_both_bodies(renderer, context):
    html, text = renderer.render("task_assigned", **context)

    assert "Hello Ada!" in html
    assert 'href="http://localhost:8000/dashboard"' in html
    assert "Task: Write report" in html
    assert "Hello Ada!" in text
    assert "View Task: http://localhost:8000/dashboard" in text
    assert "Status: Pending" in text
    assert "<" not in text


def test_html_is_autoescaped(renderer, context):
    context["lines"] = ["Task: <script>alert(1)</script>"]

    html, text = renderer.render("task_assigned", **context)

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Task: <script>alert(1)</script>" in text


def test_missing_template_raises(renderer):
    with pytest.raises(TemplateNotFoundError):
        renderer.render("does_not_exist")


def test_html_to_text_keeps_links():
    text = EmailTemplateRenderer._html_to_text(
        '<p>Hi &amp; welcome</p><a href="http://x.test/a">Open</a>'
    )

    assert "Hi & welcome" in text
    assert "Open (http://x.test/a)" in text
