"""Create registries, namespaces, webhooks, webhook_headers and webhook_deliveries tables."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001_webhooks"
down_revision = None
branch_labels = None
depends_on = None

request_method = sa.Enum("GET", "POST", name="webhook_request_method")
content_type = sa.Enum("application/json", "application/x-www-form-urlencoded", name="webhook_content_type")


def upgrade() -> None:
    op.create_table(
        "registries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False, unique=True),
        sa.Column("hostname", sa.Text(), nullable=False, unique=True),
        sa.Column("external_hostname", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "namespaces",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column(
            "registry_id",
            sa.Integer(),
            sa.ForeignKey("registries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_global", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("registry_id", "name", name="uq_namespaces_registry_id_name"),
    )
    op.create_index("ix_namespaces_registry_id", "namespaces", ["registry_id"])

    op.create_table(
        "webhooks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "namespace_id",
            sa.Integer(),
            sa.ForeignKey("namespaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("request_method", request_method, nullable=False),
        sa.Column("content_type", content_type, nullable=False),
        sa.Column("username", sa.Text(), nullable=False, server_default=""),
        sa.Column("password", sa.Text(), nullable=False, server_default=""),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_webhooks_namespace_id", "webhooks", ["namespace_id"])

    op.create_table(
        "webhook_headers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "webhook_id",
            sa.Integer(),
            sa.ForeignKey("webhooks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.UniqueConstraint("webhook_id", "name", name="uq_webhook_headers_webhook_id_name"),
    )
    op.create_index("ix_webhook_headers_webhook_id", "webhook_headers", ["webhook_id"])

    op.create_table(
        "webhook_deliveries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "webhook_id",
            sa.Integer(),
            sa.ForeignKey("webhooks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("uuid", sa.String(36), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("request_header", sa.JSON(), nullable=False),
        sa.Column("request_body", sa.Text(), nullable=False),
        sa.Column("response_header", sa.JSON(), nullable=False),
        sa.Column("response_body", sa.Text(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("webhook_id", "uuid", name="uq_webhook_deliveries_webhook_id_uuid"),
    )
    op.create_index("ix_webhook_deliveries_webhook_id", "webhook_deliveries", ["webhook_id"])


def downgrade() -> None:
    # Drop tables in reverse order (children first due to FKs)
    op.drop_index("ix_webhook_deliveries_webhook_id", table_name="webhook_deliveries")
    op.drop_table("webhook_deliveries")
    op.drop_index("ix_webhook_headers_webhook_id", table_name="webhook_headers")
    op.drop_table("webhook_headers")
    op.drop_index("ix_webhooks_namespace_id", table_name="webhooks")
    op.drop_table("webhooks")
    op.drop_index("ix_namespaces_registry_id", table_name="namespaces")
    op.drop_table("namespaces")
    op.drop_table("registries")

    bind = op.get_bind()
    content_type.drop(bind, checkfirst=True)
    request_method.drop(bind, checkfirst=True)
