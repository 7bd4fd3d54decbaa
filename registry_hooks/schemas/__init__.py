"""Public schema exports."""

from .event import NotificationAccepted, RegistryNotification
from .webhook import (
    RedeliveryResponse,
    WebhookCreate,
    WebhookDeliveryResponse,
    WebhookHeaderCreate,
    WebhookHeaderResponse,
    WebhookResponse,
    WebhookUpdate,
)

__all__ = [
    "NotificationAccepted",
    "RegistryNotification",
    "RedeliveryResponse",
    "WebhookCreate",
    "WebhookDeliveryResponse",
    "WebhookHeaderCreate",
    "WebhookHeaderResponse",
    "WebhookResponse",
    "WebhookUpdate",
]
