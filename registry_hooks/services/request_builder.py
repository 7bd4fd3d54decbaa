"""Turns a webhook configuration and an event body into an outbound request."""
from __future__ import annotations

from registry_hooks.core.http import WEBHOOK_TIMEOUT_SECONDS, OutboundRequest
from registry_hooks.models.webhook import RequestMethod, Webhook
from registry_hooks.services.webhook_repository import WebhookRepository


class RequestBuilder:
    """Builds requests from the webhook's current configuration."""

    def __init__(self, repository: WebhookRepository) -> None:
        self._repository = repository

    def build(self, webhook: Webhook, body: bytes) -> OutboundRequest:
        headers, credentials = self._repository.headers_and_auth(webhook)
        return OutboundRequest(
            method=RequestMethod(webhook.request_method).value,
            url=webhook.url,
            headers=headers,
            body=body,
            timeout=WEBHOOK_TIMEOUT_SECONDS,
            credentials=credentials,
        )
