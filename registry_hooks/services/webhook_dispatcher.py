"""Fans a registry event out to every enabled webhook of its namespace."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Mapping

from sqlalchemy.orm import Session

from registry_hooks.core.http import DeliveryOutcome, OutboundRequest, WebhookHttpClient, canonical_json
from registry_hooks.models.webhook import Webhook
from registry_hooks.models.webhook_delivery import WebhookDelivery
from registry_hooks.services.delivery_recorder import DeliveryRecorder
from registry_hooks.services.namespace_repository import NamespaceRepository
from registry_hooks.services.request_builder import RequestBuilder
from registry_hooks.services.webhook_repository import WebhookRepository

logger = logging.getLogger(__name__)


class WebhookDispatcher:
    """Sends one event to all enabled webhooks of a namespace in parallel.

    ``dispatch`` blocks until every request has finished (or hit its
    timeout) and every outcome is recorded. Requests run on worker threads;
    the database session is only used from the calling thread.
    """

    def __init__(
        self,
        session: Session,
        http_client: WebhookHttpClient,
        *,
        recorder: DeliveryRecorder | None = None,
    ) -> None:
        self._session = session
        self._http = http_client
        self._repository = WebhookRepository(session)
        self._namespaces = NamespaceRepository(session)
        self._builder = RequestBuilder(self._repository)
        self._recorder = recorder or DeliveryRecorder(session)

    def handle_push_event(self, event: Mapping[str, Any]) -> list[WebhookDelivery]:
        """Dispatch a push event to the namespace it refers to.

        Events that do not resolve to a known registry and namespace are
        dropped without error.
        """
        namespace = self._namespaces.resolve_from_event(event)
        if namespace is None:
            return []
        return self.dispatch(event, namespace.id)

    def dispatch(self, event: Mapping[str, Any], namespace_id: int) -> list[WebhookDelivery]:
        """Send ``event`` to every enabled webhook of ``namespace_id``.

        Returns the recorded deliveries in completion order.
        """
        webhooks = self._repository.list_enabled(namespace_id)
        if not webhooks:
            logger.debug(f"No enabled webhooks for namespace {namespace_id}")
            return []

        body = canonical_json(event)
        body_bytes = body.encode("utf-8")
        pending: list[tuple[Webhook, OutboundRequest]] = [
            (webhook, self._builder.build(webhook, body_bytes)) for webhook in webhooks
        ]

        logger.info(f"Dispatching event to {len(pending)} webhook(s) of namespace {namespace_id}")

        deliveries: list[WebhookDelivery] = []
        with ThreadPoolExecutor(max_workers=len(pending), thread_name_prefix="webhook-fanout") as executor:
            futures: dict[Future[DeliveryOutcome], tuple[int, Webhook, OutboundRequest]] = {
                executor.submit(self._http.send, request): (webhook.id, webhook, request)
                for webhook, request in pending
            }
            for future in as_completed(futures):
                webhook_id, webhook, request = futures[future]
                outcome = self._outcome_of(future, request)
                delivery = self._record(webhook_id, webhook, request, body, outcome)
                if delivery is not None:
                    deliveries.append(delivery)

        succeeded = sum(1 for delivery in deliveries if delivery.success)
        logger.info(f"Namespace {namespace_id}: {succeeded}/{len(deliveries)} webhook deliveries succeeded")
        return deliveries

    def _record(
        self,
        webhook_id: int,
        webhook: Webhook,
        request: OutboundRequest,
        body: str,
        outcome: DeliveryOutcome,
    ) -> WebhookDelivery | None:
        try:
            return self._recorder.record(webhook, request.headers, body, outcome)
        except Exception as e:
            # e.g. the webhook was deleted while its request was in flight
            self._session.rollback()
            logger.error(
                f"Could not record delivery for webhook {webhook_id} (status {outcome.status}): {e}",
                exc_info=True,
            )
            return None

    @staticmethod
    def _outcome_of(future: Future[DeliveryOutcome], request: OutboundRequest) -> DeliveryOutcome:
        try:
            return future.result()
        except Exception as e:
            # One broken request must not keep siblings from being recorded
            logger.error(f"Unexpected error calling webhook {request.url}: {e}", exc_info=True)
            return DeliveryOutcome.from_error(f"Unexpected error: {e}")
