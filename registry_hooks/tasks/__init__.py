"""Tasks module for background job processing."""
from __future__ import annotations

from .celery_app import celery_app, get_celery_app
from .webhook_tasks import dispatch_push_event_task

__all__ = [
    "celery_app",
    "dispatch_push_event_task",
    "get_celery_app",
]
