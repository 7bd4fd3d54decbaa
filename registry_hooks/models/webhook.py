"""Webhook model definition."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from registry_hooks.core.urls import normalize_webhook_url, url_host

from .base import Base, utcnow

if TYPE_CHECKING:
    from .namespace import Namespace
    from .webhook_delivery import WebhookDelivery
    from .webhook_header import WebhookHeader


class RequestMethod(str, Enum):
    """HTTP methods a webhook can be called with."""

    GET = "GET"
    POST = "POST"


class ContentType(str, Enum):
    """Content types a webhook request can declare."""

    JSON = "application/json"
    FORM = "application/x-www-form-urlencoded"


class Webhook(Base):
    """Outbound webhook registered on a namespace."""

    __tablename__ = "webhooks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    namespace_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("namespaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    request_method: Mapped[RequestMethod] = mapped_column(
        SAEnum(RequestMethod, name="webhook_request_method", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=RequestMethod.POST,
    )
    content_type: Mapped[ContentType] = mapped_column(
        SAEnum(ContentType, name="webhook_content_type", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ContentType.JSON,
    )
    username: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    password: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    namespace: Mapped["Namespace"] = relationship(back_populates="webhooks")
    headers: Mapped[list["WebhookHeader"]] = relationship(
        back_populates="webhook",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WebhookHeader.id",
    )
    deliveries: Mapped[list["WebhookDelivery"]] = relationship(
        back_populates="webhook",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("url")
    def _normalize_url(self, key: str, value: str) -> str:
        return normalize_webhook_url(value)

    @property
    def host(self) -> str | None:
        """Hostname the webhook points at."""
        return url_host(self.url)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)
