"""ORM models exposed for external modules."""
from .base import Base
from .namespace import Namespace, Registry
from .webhook import ContentType, RequestMethod, Webhook
from .webhook_delivery import WebhookDelivery
from .webhook_header import WebhookHeader

__all__ = [
    "Base",
    "ContentType",
    "Namespace",
    "Registry",
    "RequestMethod",
    "Webhook",
    "WebhookDelivery",
    "WebhookHeader",
]
