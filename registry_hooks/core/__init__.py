"""Core application utilities and infrastructure."""
from .config import Settings, get_settings
from .http import (
    WEBHOOK_TIMEOUT_SECONDS,
    DeliveryOutcome,
    OutboundRequest,
    WebhookHttpClient,
    canonical_json,
    get_http_client,
)
from .redis_manager import create_redis_client, get_redis_client
from .urls import InvalidWebhookURL, normalize_webhook_url

__all__ = [
    "Settings",
    "get_settings",
    "WEBHOOK_TIMEOUT_SECONDS",
    "DeliveryOutcome",
    "OutboundRequest",
    "WebhookHttpClient",
    "canonical_json",
    "get_http_client",
    "create_redis_client",
    "get_redis_client",
    "InvalidWebhookURL",
    "normalize_webhook_url",
]
