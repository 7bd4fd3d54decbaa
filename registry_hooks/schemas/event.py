"""Schemas for registry notifications."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

PUSH_ACTION = "push"


class RegistryNotification(BaseModel):
    """Envelope the registry POSTs to its notification endpoints.

    Individual events are kept as plain dictionaries: they are forwarded to
    webhooks verbatim, so nothing may be dropped or reordered.
    """

    events: list[dict[str, Any]] = Field(default_factory=list, description="Registry events")


class NotificationAccepted(BaseModel):
    """Acknowledgement returned to the registry."""

    accepted: int = Field(description="Number of push events queued for dispatch")
