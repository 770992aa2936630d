"""Notification and queue service wiring."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from taskboard.core.settings import (
    get_app_settings,
    get_email_settings,
    get_queue_settings,
)
from taskboard.features.notifications.dispatch import DispatchService
from taskboard.features.notifications.executor import DeliveryAttemptExecutor
from taskboard.features.notifications.fallback import LoggingFallbackNotifier
from taskboard.features.notifications.jobs import TaskAssignedJobHandler
from taskboard.features.queue_monitor.service import QueueMonitor
from taskboard.infra.database import AsyncSessionLocal
from taskboard.infra.email import (
    EmailNotConfiguredError,
    get_email_provider,
    get_template_renderer,
)
from taskboard.infra.queue import JobHandler, QueueStore

logger = logging.getLogger(__name__)


@lru_cache
def get_queue_store() -> QueueStore:
    return QueueStore(AsyncSessionLocal)


def build_delivery_executor() -> DeliveryAttemptExecutor:
    """Executor for the configured transport.

    A missing transport does not fail the build; attempts then report
    ``Email transport is not configured``.
    """
    email_settings = get_email_settings()
    try:
        provider = get_email_provider(email_settings)
    except EmailNotConfiguredError as e:
        logger.warning("Email transport unavailable", extra={"error": str(e)})
        provider = None

    return DeliveryAttemptExecutor(
        provider=provider,
        renderer=get_template_renderer(email_settings),
        app_settings=get_app_settings(),
        email_settings=email_settings,
    )


@lru_cache
def get_delivery_executor() -> DeliveryAttemptExecutor:
    return build_delivery_executor()


def get_dispatch_service(
    executor: Annotated[DeliveryAttemptExecutor, Depends(get_delivery_executor)],
    store: Annotated[QueueStore, Depends(get_queue_store)],
) -> DispatchService:
    return DispatchService(
        executor,
        store,
        fallback=LoggingFallbackNotifier(),
        queue_settings=get_queue_settings(),
        email_settings=get_email_settings(),
    )


def get_job_handlers() -> list[JobHandler]:
    """Handlers a queue worker runs, one per job type."""
    return [TaskAssignedJobHandler(get_delivery_executor())]


@lru_cache
def get_queue_monitor() -> QueueMonitor:
    """Process-wide monitor so the stats cache survives across requests."""
    return QueueMonitor(get_queue_store(), ttl=get_queue_settings().stats_cache_ttl)


def clear_service_caches() -> None:
    for cached in (get_queue_store, get_delivery_executor, get_queue_monitor):
        cached.cache_clear()


DispatchServiceDep = Annotated[DispatchService, Depends(get_dispatch_service)]
QueueMonitorDep = Annotated[QueueMonitor, Depends(get_queue_monitor)]
