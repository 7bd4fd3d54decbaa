"""Custom header attached to a webhook."""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .webhook import Webhook


class WebhookHeader(Base):
    """A (name, value) pair merged into every request of its webhook."""

    __tablename__ = "webhook_headers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    webhook_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("webhooks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    webhook: Mapped["Webhook"] = relationship(back_populates="headers")

    __table_args__ = (
        UniqueConstraint("webhook_id", "name", name="uq_webhook_headers_webhook_id_name"),
    )
