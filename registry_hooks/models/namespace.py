"""Registry and namespace model definitions."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .webhook import Webhook


class Registry(Base):
    """A container registry that sends push notifications to this service."""

    __tablename__ = "registries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    hostname: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    external_hostname: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    namespaces: Mapped[list["Namespace"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Namespace(Base):
    """Organizational scope owning repositories and webhooks."""

    __tablename__ = "namespaces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    registry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("registries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_global: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    owner: Mapped[Registry] = relationship(back_populates="namespaces")
    webhooks: Mapped[list["Webhook"]] = relationship(
        back_populates="namespace",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("registry_id", "name", name="uq_namespaces_registry_id_name"),
    )
