"""Tests for WebhookRepository (the webhook configuration store)."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from registry_hooks.core.http import DeliveryOutcome
from registry_hooks.models.webhook import ContentType, RequestMethod
from registry_hooks.models.webhook_delivery import WebhookDelivery
from registry_hooks.models.webhook_header import WebhookHeader
from registry_hooks.schemas.webhook import WebhookHeaderCreate, WebhookUpdate
from registry_hooks.services.delivery_recorder import DeliveryRecorder
from registry_hooks.services.namespace_repository import NamespaceRepository
from registry_hooks.services.webhook_repository import WebhookRepository


class TestWebhookRepository:
    """Test suite for WebhookRepository."""

    def test_create_stores_normalized_url_and_defaults(self, make_webhook) -> None:
        webhook = make_webhook("hooks.example.com/push")

        assert webhook.url == "http://hooks.example.com/push"
        assert webhook.request_method == RequestMethod.POST
        assert webhook.content_type == ContentType.JSON
        assert webhook.username == ""
        assert webhook.password == ""

    def test_list_enabled_skips_disabled_and_other_namespaces(
        self, db_session: Session, make_webhook, registry, namespace
    ) -> None:
        enabled = make_webhook("http://a.example.com", enabled=True)
        make_webhook("http://b.example.com", enabled=False)
        other_namespace = NamespaceRepository(db_session).get_from_repository_name("app", registry)
        make_webhook("http://c.example.com", enabled=True, namespace_id=other_namespace.id)

        webhooks = WebhookRepository(db_session).list_enabled(namespace.id)

        assert [w.id for w in webhooks] == [enabled.id]

    def test_update_changes_only_given_fields(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook("http://a.example.com", username="alice", password="pw")
        repo = WebhookRepository(db_session)

        updated = repo.update(webhook.id, WebhookUpdate(url="b.example.com/x", password=""))

        assert updated is not None
        assert updated.url == "http://b.example.com/x"
        assert updated.username == "alice"
        assert updated.password == ""
        assert updated.enabled is True

    def test_update_unknown_webhook_returns_none(self, db_session: Session) -> None:
        assert WebhookRepository(db_session).update(999, WebhookUpdate(enabled=False)) is None

    def test_headers_seed_content_type(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook(content_type=ContentType.FORM, headers={"X-Token": "abc"})

        headers, auth = WebhookRepository(db_session).headers_and_auth(webhook)

        assert headers == {
            "Content-Type": "application/x-www-form-urlencoded",
            "X-Token": "abc",
        }
        assert auth is None

    def test_custom_header_overrides_content_type(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook(headers={"content-type": "text/plain"})

        headers, _ = WebhookRepository(db_session).headers_and_auth(webhook)

        assert headers == {"content-type": "text/plain"}

    def test_credentials_need_both_username_and_password(self, db_session: Session, make_webhook) -> None:
        repo = WebhookRepository(db_session)

        only_user = make_webhook(username="alice", password="")
        only_password = make_webhook(username="", password="pw")
        both = make_webhook(username="alice", password="pw")

        assert repo.headers_and_auth(only_user)[1] is None
        assert repo.headers_and_auth(only_password)[1] is None
        assert repo.headers_and_auth(both)[1] == ("alice", "pw")

    def test_delete_header_checks_ownership(self, db_session: Session, make_webhook) -> None:
        first = make_webhook(headers={"X-A": "1"})
        second = make_webhook()
        repo = WebhookRepository(db_session)
        header = repo.list_headers(first.id)[0]

        assert repo.delete_header(second.id, header.id) is False
        assert repo.delete_header(first.id, header.id) is True
        assert repo.list_headers(first.id) == []

    def test_delete_cascades_headers_and_deliveries(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook(headers={"X-A": "1", "X-B": "2"})
        recorder = DeliveryRecorder(db_session)
        for _ in range(3):
            recorder.record(webhook, {"Content-Type": "application/json"}, "{}", DeliveryOutcome(status=200))
        webhook_id = webhook.id
        repo = WebhookRepository(db_session)

        assert repo.delete(webhook_id) is True

        assert repo.get_by_id(webhook_id) is None
        header_count = db_session.scalar(
            select(func.count()).select_from(WebhookHeader).where(WebhookHeader.webhook_id == webhook_id)
        )
        delivery_count = db_session.scalar(
            select(func.count()).select_from(WebhookDelivery).where(WebhookDelivery.webhook_id == webhook_id)
        )
        assert header_count == 0
        assert delivery_count == 0

    def test_delete_unknown_webhook_returns_false(self, db_session: Session) -> None:
        assert WebhookRepository(db_session).delete(12345) is False

    def test_deliveries_are_paginated_newest_first(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        recorder = DeliveryRecorder(db_session)
        created = [
            recorder.record(webhook, {}, "{}", DeliveryOutcome(status=200 + i)) for i in range(5)
        ]
        repo = WebhookRepository(db_session)

        page, total = repo.get_deliveries_for_webhook(webhook.id, limit=2, offset=0)

        assert total == 5
        assert [d.id for d in page] == [created[4].id, created[3].id]

    def test_get_delivery_checks_ownership(self, db_session: Session, make_webhook) -> None:
        first = make_webhook()
        second = make_webhook()
        delivery = DeliveryRecorder(db_session).record(first, {}, "{}", DeliveryOutcome(status=200))
        repo = WebhookRepository(db_session)

        assert repo.get_delivery(first.id, delivery.id).id == delivery.id
        assert repo.get_delivery(second.id, delivery.id) is None

    def test_add_header_round_trips(self, db_session: Session, make_webhook) -> None:
        webhook = make_webhook()
        repo = WebhookRepository(db_session)

        header = repo.add_header(webhook.id, WebhookHeaderCreate(name="X-Env", value="prod"))

        assert header.webhook_id == webhook.id
        assert [(h.name, h.value) for h in repo.list_headers(webhook.id)] == [("X-Env", "prod")]
