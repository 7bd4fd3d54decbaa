"""Webhook repository for database operations."""
from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from registry_hooks.models.webhook import ContentType, Webhook
from registry_hooks.models.webhook_delivery import WebhookDelivery
from registry_hooks.models.webhook_header import WebhookHeader
from registry_hooks.schemas.webhook import WebhookCreate, WebhookHeaderCreate, WebhookUpdate

CONTENT_TYPE_HEADER = "Content-Type"


class WebhookRepository:
    """Handles database operations for Webhook entities."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with a SQLAlchemy session.
        
        Args:
            session: Active database session for executing queries
        """
        self._session = session

    def create(self, namespace_id: int, webhook: WebhookCreate) -> Webhook:
        """Create a new webhook on a namespace.
        
        Args:
            namespace_id: Owning namespace
            webhook: WebhookCreate schema with webhook data
            
        Returns:
            Created Webhook instance
        """
        db_webhook = Webhook(
            namespace_id=namespace_id,
            url=webhook.url,
            request_method=webhook.request_method,
            content_type=webhook.content_type,
            username=webhook.username,
            password=webhook.password,
            enabled=webhook.enabled,
        )
        self._session.add(db_webhook)
        self._session.commit()
        self._session.refresh(db_webhook)
        return db_webhook

    def get_by_id(self, webhook_id: int) -> Webhook | None:
        """Fetch a webhook by its database ID."""
        return self._session.get(Webhook, webhook_id)

    def get_for_namespace(self, namespace_id: int, webhook_id: int) -> Webhook | None:
        """Fetch a webhook only if it belongs to the given namespace."""
        webhook = self.get_by_id(webhook_id)
        if webhook is None or webhook.namespace_id != namespace_id:
            return None
        return webhook

    def list_for_namespace(self, namespace_id: int) -> Sequence[Webhook]:
        """All webhooks of a namespace, newest first."""
        return self._session.scalars(
            select(Webhook)
            .where(Webhook.namespace_id == namespace_id)
            .order_by(Webhook.created_at.desc(), Webhook.id.desc())
        ).all()

    def list_enabled(self, namespace_id: int) -> Sequence[Webhook]:
        """Enabled webhooks of a namespace, i.e. the ones an event fans out to."""
        return self._session.scalars(
            select(Webhook)
            .where(Webhook.namespace_id == namespace_id, Webhook.enabled.is_(True))
            .order_by(Webhook.id)
        ).all()

    def update(self, webhook_id: int, webhook: WebhookUpdate) -> Webhook | None:
        """Update a webhook by ID.
        
        Args:
            webhook_id: Database identifier
            webhook: WebhookUpdate schema with fields to update
            
        Returns:
            Updated Webhook instance if found, None otherwise
        """
        db_webhook = self.get_by_id(webhook_id)
        if db_webhook is None:
            return None
        
        # Update only provided fields
        for field_name, value in webhook.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(db_webhook, field_name, value)
        
        self._session.commit()
        self._session.refresh(db_webhook)
        return db_webhook

    def delete(self, webhook_id: int) -> bool:
        """Delete a webhook together with its headers and deliveries.
        
        Returns:
            True if webhook was deleted, False if not found
        """
        db_webhook = self.get_by_id(webhook_id)
        if db_webhook is None:
            return False
        
        self._session.delete(db_webhook)
        self._session.commit()
        return True

    def list_headers(self, webhook_id: int) -> Sequence[WebhookHeader]:
        """Custom headers of a webhook in insertion order."""
        return self._session.scalars(
            select(WebhookHeader).where(WebhookHeader.webhook_id == webhook_id).order_by(WebhookHeader.id)
        ).all()

    def add_header(self, webhook_id: int, header: WebhookHeaderCreate) -> WebhookHeader:
        """Attach a custom header; raises IntegrityError if the name is taken."""
        db_header = WebhookHeader(webhook_id=webhook_id, name=header.name, value=header.value)
        self._session.add(db_header)
        self._session.commit()
        self._session.refresh(db_header)
        return db_header

    def delete_header(self, webhook_id: int, header_id: int) -> bool:
        """Remove a custom header; False when it does not exist on that webhook."""
        db_header = self._session.get(WebhookHeader, header_id)
        if db_header is None or db_header.webhook_id != webhook_id:
            return False
        self._session.delete(db_header)
        self._session.commit()
        return True

    def headers_and_auth(self, webhook: Webhook) -> tuple[dict[str, str], tuple[str, str] | None]:
        """Headers and basic auth credentials for a request to ``webhook``.

        ``Content-Type`` is seeded from the webhook and can be overridden by a
        custom header of the same name. Credentials are only returned when
        both username and password are set.
        """
        headers: dict[str, str] = {CONTENT_TYPE_HEADER: ContentType(webhook.content_type).value}
        for header in self.list_headers(webhook.id):
            for existing in [name for name in headers if name.lower() == header.name.lower()]:
                del headers[existing]
            headers[header.name] = header.value

        if not webhook.username or not webhook.password:
            return headers, None
        return headers, (webhook.username, webhook.password)

    def get_delivery(self, webhook_id: int, delivery_id: int) -> WebhookDelivery | None:
        """Fetch a delivery only if it belongs to the given webhook."""
        delivery = self._session.get(WebhookDelivery, delivery_id)
        if delivery is None or delivery.webhook_id != webhook_id:
            return None
        return delivery

    def get_deliveries_for_webhook(
        self, webhook_id: int, limit: int = 50, offset: int = 0
    ) -> tuple[Sequence[WebhookDelivery], int]:
        """Get delivery history for a webhook with pagination.
        
        Args:
            webhook_id: Webhook ID to get deliveries for
            limit: Maximum number of deliveries to return
            offset: Number of deliveries to skip
            
        Returns:
            Tuple of (deliveries sequence, total count)
        """
        query = (
            self._session.query(WebhookDelivery)
            .filter(WebhookDelivery.webhook_id == webhook_id)
            .order_by(WebhookDelivery.created_at.desc(), WebhookDelivery.id.desc())
        )
        
        total = query.count()
        deliveries = query.limit(limit).offset(offset).all()
        
        return deliveries, total
