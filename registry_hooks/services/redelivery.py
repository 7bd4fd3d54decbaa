"""Replays a past delivery against the webhook's current configuration."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from registry_hooks.core.http import DeliveryOutcome, WebhookHttpClient, canonical_json
from registry_hooks.models.base import utcnow
from registry_hooks.models.webhook_delivery import WebhookDelivery
from registry_hooks.services.request_builder import RequestBuilder
from registry_hooks.services.webhook_repository import WebhookRepository

logger = logging.getLogger(__name__)


class DeliveryConflictError(Exception):
    """Raised when the delivery was replayed by someone else in the meantime."""


@dataclass(frozen=True)
class RedeliveryResult:
    """The updated delivery plus the outcome of this replay attempt."""

    delivery: WebhookDelivery
    outcome: DeliveryOutcome

    @property
    def delivered(self) -> bool:
        """Whether the endpoint was reached, whatever status it answered."""
        return not self.outcome.transport_failed


class RedeliveryService:
    """Re-sends the stored request body of a delivery, synchronously."""

    def __init__(self, session: Session, http_client: WebhookHttpClient) -> None:
        self._session = session
        self._http = http_client
        self._builder = RequestBuilder(WebhookRepository(session))

    def redeliver(self, delivery: WebhookDelivery) -> RedeliveryResult:
        """Replay ``delivery`` and overwrite its response fields in place.

        Headers and credentials come from the webhook as it is configured now;
        the body is the one originally sent. A transport failure is recorded
        with status 0 and the error text rather than leaving the old response.

        Raises:
            DeliveryConflictError: the row changed since it was loaded
        """
        webhook = delivery.webhook
        body = canonical_json(json.loads(delivery.request_body)).encode("utf-8")
        request = self._builder.build(webhook, body)

        logger.info(f"Redelivering {delivery.uuid} to webhook {webhook.id}")
        outcome = self._http.send(request)

        delivery.status = outcome.status
        delivery.response_header = dict(outcome.headers)
        delivery.response_body = outcome.body
        delivery.error_message = outcome.error
        delivery.updated_at = utcnow()

        try:
            self._session.commit()
        except StaleDataError as e:
            self._session.rollback()
            logger.warning(f"Delivery {delivery.id} was modified concurrently, discarding replay result")
            raise DeliveryConflictError(f"Delivery {delivery.id} was modified concurrently") from e

        self._session.refresh(delivery)
        if outcome.transport_failed:
            logger.warning(f"Redelivery {delivery.uuid} failed: {outcome.error}")
        return RedeliveryResult(delivery=delivery, outcome=outcome)
