"""Celery tasks for webhook dispatch."""
from __future__ import annotations

import logging
from typing import Any

from celery.signals import worker_process_shutdown

from registry_hooks.core.db import session_scope
from registry_hooks.core.http import get_http_client, shutdown_http_client
from registry_hooks.services.webhook_dispatcher import WebhookDispatcher
from registry_hooks.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="dispatch_push_event",
    acks_late=True,
    reject_on_worker_lost=True,
)
def dispatch_push_event_task(event: dict[str, Any]) -> dict:
    """Fan a registry push event out to the webhooks of its namespace.
    
    Failed deliveries are recorded, not retried: replaying is an explicit
    admin action. The task itself is therefore not autoretried either.
    
    Args:
        event: Registry event exactly as received; it is the request body
        
    Returns:
        dict with dispatch summary
    """
    repository = (event.get("target") or {}).get("repository")
    logger.info(f"Starting webhook dispatch for push to {repository}")

    with session_scope() as session:
        dispatcher = WebhookDispatcher(session, get_http_client())
        deliveries = dispatcher.handle_push_event(event)
        summary = {
            "status": "dispatched" if deliveries else "skipped",
            "repository": repository,
            "deliveries": len(deliveries),
            "succeeded": sum(1 for delivery in deliveries if delivery.success),
        }

    logger.info(
        f"Webhook dispatch for {repository} finished: "
        f"{summary['succeeded']}/{summary['deliveries']} succeeded"
    )
    return summary


@worker_process_shutdown.connect
def _close_http_client(**kwargs: Any) -> None:
    shutdown_http_client()
