"""Intake of registry notifications and hand-off to background dispatch."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from registry_hooks.schemas.event import PUSH_ACTION
from registry_hooks.tasks.webhook_tasks import dispatch_push_event_task

logger = logging.getLogger(__name__)


def is_push_event(event: Mapping[str, Any]) -> bool:
    """Whether ``event`` is a push that names its target repository."""
    if event.get("action") != PUSH_ACTION:
        return False
    target = event.get("target")
    return isinstance(target, Mapping) and bool(target.get("repository"))


class RegistryEventService:
    """Service for publishing registry events to webhooks."""

    def publish_push_events(self, events: Iterable[Mapping[str, Any]]) -> int:
        """Enqueue one dispatch task per push event.

        Other actions (pulls, deletes) are ignored. A failure to enqueue one
        event is logged and does not stop the others.

        Args:
            events: Events from a registry notification envelope

        Returns:
            Number of events handed to the task queue
        """
        accepted = 0
        for event in events:
            if not is_push_event(event):
                logger.debug(f"Skipping registry event with action {event.get('action')!r}")
                continue
            try:
                dispatch_push_event_task.delay(dict(event))
                accepted += 1
                logger.debug(f"Enqueued dispatch for push to {event['target']['repository']}")
            except Exception as e:
                logger.error(
                    f"Failed to enqueue webhook dispatch for event {event.get('id')}: {e}",
                    exc_info=True,
                )
                # Continue with other events even if one fails

        if accepted:
            logger.info(f"Queued {accepted} push event(s) for webhook dispatch")
        return accepted
