"""Webhook delivery model definition."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .webhook import Webhook

SUCCESS_STATUS = 200


class WebhookDelivery(Base):
    """One webhook invocation: what was sent and what came back.

    Rows are inserted once per dispatch. Redelivery overwrites the response
    side in place; the request snapshot and ``uuid`` never change.
    """

    __tablename__ = "webhook_deliveries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    webhook_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("webhooks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    uuid: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[int] = mapped_column(Integer, nullable=False)
    request_header: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    request_body: Mapped[str] = mapped_column(Text, nullable=False)
    response_header: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    response_body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    webhook: Mapped["Webhook"] = relationship(back_populates="deliveries")

    __table_args__ = (
        UniqueConstraint("webhook_id", "uuid", name="uq_webhook_deliveries_webhook_id_uuid"),
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def success(self) -> bool:
        """Whether the endpoint answered with HTTP 200."""
        return self.status == SUCCESS_STATUS
