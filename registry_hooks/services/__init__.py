"""Services module for business logic."""
from __future__ import annotations

from .delivery_recorder import DeliveryRecorder
from .namespace_repository import NamespaceRepository
from .redelivery import DeliveryConflictError, RedeliveryResult, RedeliveryService
from .request_builder import RequestBuilder
from .webhook_dispatcher import WebhookDispatcher
from .webhook_repository import WebhookRepository

__all__ = [
    "DeliveryConflictError",
    "DeliveryRecorder",
    "NamespaceRepository",
    "RedeliveryResult",
    "RedeliveryService",
    "RequestBuilder",
    "WebhookDispatcher",
    "WebhookRepository",
]
