"""Tests for DeliveryRecorder."""
from __future__ import annotations

import gc
from unittest.mock import Mock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registry_hooks.core.http import DeliveryOutcome
from registry_hooks.services.delivery_recorder import DeliveryRecorder, _lock_for, _webhook_locks


def _tokens(*values: str):
    return iter(values).__next__


class TestDeliveryRecorder:
    """Test suite for DeliveryRecorder."""

    def test_record_snapshots_request_and_response(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        outcome = DeliveryOutcome(status=202, headers={"x-request-id": "r1"}, body="queued")

        delivery = DeliveryRecorder(db_session).record(
            webhook, {"Content-Type": "application/json"}, '{"action":"push"}', outcome
        )

        assert delivery.id is not None
        assert delivery.webhook_id == webhook.id
        assert len(delivery.uuid) == 36
        assert delivery.status == 202
        assert delivery.request_header == {"Content-Type": "application/json"}
        assert delivery.request_body == '{"action":"push"}'
        assert delivery.response_header == {"x-request-id": "r1"}
        assert delivery.response_body == "queued"
        assert delivery.error_message is None
        assert delivery.created_at is not None
        assert delivery.updated_at is not None

    def test_tokens_are_distinct_per_webhook(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        recorder = DeliveryRecorder(db_session)

        tokens = {recorder.record(webhook, {}, "{}", DeliveryOutcome(status=200)).uuid for _ in range(20)}

        assert len(tokens) == 20

    def test_taken_token_is_regenerated(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        recorder = DeliveryRecorder(db_session, token_factory=_tokens("dup", "dup", "fresh"))

        first = recorder.record(webhook, {}, "{}", DeliveryOutcome(status=200))
        second = recorder.record(webhook, {}, "{}", DeliveryOutcome(status=200))

        assert first.uuid == "dup"
        assert second.uuid == "fresh"

    def test_same_token_allowed_on_different_webhooks(self, db_session: Session, make_webhook) -> None:
        first_webhook = make_webhook()
        second_webhook = make_webhook()

        first = DeliveryRecorder(db_session, token_factory=_tokens("shared")).record(
            first_webhook, {}, "{}", DeliveryOutcome(status=200)
        )
        second = DeliveryRecorder(db_session, token_factory=_tokens("shared")).record(
            second_webhook, {}, "{}", DeliveryOutcome(status=200)
        )

        assert first.uuid == second.uuid == "shared"
        assert first.id != second.id

    def test_unique_constraint_violation_retries_with_new_token(self, db_session: Session, make_webhook) -> None:
        """A token taken between the check and the insert (another worker) is retried."""
        webhook = make_webhook()
        DeliveryRecorder(db_session, token_factory=_tokens("raced")).record(
            webhook, {}, "{}", DeliveryOutcome(status=200)
        )
        recorder = DeliveryRecorder(db_session)
        recorder._unused_token = Mock(side_effect=["raced", "winner"])

        delivery = recorder.record(webhook, {}, "{}", DeliveryOutcome(status=500))

        assert delivery.uuid == "winner"
        assert delivery.status == 500
        assert recorder._unused_token.call_count == 2

    def test_transport_failure_is_recorded(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()

        delivery = DeliveryRecorder(db_session).record(
            webhook, {}, "{}", DeliveryOutcome.from_error("Request failed: connection refused")
        )

        assert delivery.status == 0
        assert delivery.success is False
        assert delivery.error_message == "Request failed: connection refused"

    def test_success_means_status_200(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        recorder = DeliveryRecorder(db_session)

        statuses = {code: recorder.record(webhook, {}, "{}", DeliveryOutcome(status=code)).success
                    for code in (200, 201, 204, 301, 404, 500)}

        assert statuses == {200: True, 201: False, 204: False, 301: False, 404: False, 500: False}

    def test_other_integrity_errors_are_not_retried(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        webhook_id = webhook.id
        db_session.execute(text("DELETE FROM webhooks WHERE id = :id"), {"id": webhook_id})
        db_session.commit()
        recorder = DeliveryRecorder(db_session)
        recorder._unused_token = Mock(return_value="orphan")

        with pytest.raises(IntegrityError):
            recorder.record(Mock(id=webhook_id), {}, "{}", DeliveryOutcome(status=200))

        assert recorder._unused_token.call_count == 1


def test_webhook_locks_are_released_when_unused() -> None:
    lock = _lock_for(424242)
    assert _lock_for(424242) is lock

    del lock
    gc.collect()

    assert 424242 not in _webhook_locks
