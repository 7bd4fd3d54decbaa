"""Persists the outcome of a webhook request as a new delivery."""
from __future__ import annotations

import logging
import threading
import uuid
import weakref
from typing import Callable, Mapping

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registry_hooks.core.http import DeliveryOutcome
from registry_hooks.models.webhook import Webhook
from registry_hooks.models.webhook_delivery import WebhookDelivery

logger = logging.getLogger(__name__)

# Retries after the unique constraint rejected a token another process took first
MAX_INSERT_ATTEMPTS = 5
TOKEN_CONSTRAINT = "uq_webhook_deliveries_webhook_id_uuid"

_locks_guard = threading.Lock()
# Entries go away once no recorder holds the lock
_webhook_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(webhook_id: int) -> threading.Lock:
    with _locks_guard:
        return _webhook_locks.setdefault(webhook_id, threading.Lock())


def _is_token_clash(error: IntegrityError) -> bool:
    """Whether ``error`` comes from the per-webhook token constraint."""
    diag = getattr(error.orig, "diag", None)
    if getattr(diag, "constraint_name", None) == TOKEN_CONSTRAINT:
        return True
    message = str(error.orig)
    return TOKEN_CONSTRAINT in message or "webhook_deliveries.uuid" in message


def _random_token() -> str:
    return str(uuid.uuid4())


class DeliveryRecorder:
    """Creates WebhookDelivery rows with a token unique to their webhook."""

    def __init__(self, session: Session, token_factory: Callable[[], str] = _random_token) -> None:
        self._session = session
        self._token_factory = token_factory

    def record(
        self,
        webhook: Webhook,
        request_headers: Mapping[str, str],
        request_body: str,
        outcome: DeliveryOutcome,
    ) -> WebhookDelivery:
        """Insert a delivery for ``webhook``; never updates an existing row."""
        webhook_id = webhook.id
        with _lock_for(webhook_id):
            attempt = 0
            while True:
                attempt += 1
                delivery = WebhookDelivery(
                    webhook_id=webhook_id,
                    uuid=self._unused_token(webhook_id),
                    status=outcome.status,
                    request_header=dict(request_headers),
                    request_body=request_body,
                    response_header=dict(outcome.headers),
                    response_body=outcome.body,
                    error_message=outcome.error,
                )
                self._session.add(delivery)
                try:
                    self._session.commit()
                except IntegrityError as e:
                    self._session.rollback()
                    if not _is_token_clash(e) or attempt >= MAX_INSERT_ATTEMPTS:
                        raise
                    logger.warning(
                        f"Delivery token clash for webhook {webhook_id}, regenerating "
                        f"(attempt {attempt}/{MAX_INSERT_ATTEMPTS})"
                    )
                    continue
                self._session.refresh(delivery)
                logger.debug(f"Recorded delivery {delivery.uuid} for webhook {webhook_id} (status {delivery.status})")
                return delivery

    def _unused_token(self, webhook_id: int) -> str:
        while True:
            token = self._token_factory()
            taken = self._session.scalar(
                select(
                    exists().where(
                        WebhookDelivery.webhook_id == webhook_id,
                        WebhookDelivery.uuid == token,
                    )
                )
            )
            if not taken:
                return token
