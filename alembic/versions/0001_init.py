"""init

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "domains",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=253), nullable=False),
        sa.Column("state", sa.String(length=50), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("web_prefix", sa.String(length=100), nullable=True),
        sa.Column("disabled", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("record_created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("record_updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_domains_name", "domains", ["name"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.String(length=100), primary_key=True),
        sa.Column("event", sa.String(length=50), nullable=False),
        sa.Column("timestamp", sa.Float(), nullable=False),
        sa.Column("domain", sa.String(length=253), nullable=False),
        sa.Column("recipient", sa.String(length=320), nullable=True),
        sa.Column("message", JSONType, nullable=True),
        sa.Column("delivery_status", JSONType, nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("severity", sa.String(length=50), nullable=True),
        sa.Column("tags", JSONType, nullable=False),
        sa.Column("storage", JSONType, nullable=True),
        sa.Column("campaigns", JSONType, nullable=False),
        sa.Column("user_variables", JSONType, nullable=True),
        sa.Column("flags", JSONType, nullable=True),
        sa.Column("routes", JSONType, nullable=False),
        sa.Column("log_level", sa.String(length=20), nullable=True),
        sa.Column("envelope", JSONType, nullable=True),
        sa.Column("message_id", sa.String(length=500), nullable=True),
        sa.Column("record_created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("record_updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_events_domain_timestamp", "events", ["domain", "timestamp"])
    op.create_index("ix_events_event", "events", ["event"])


def downgrade() -> None:
    op.drop_index("ix_events_event", table_name="events")
    op.drop_index("ix_events_domain_timestamp", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_domains_name", table_name="domains")
    op.drop_table("domains")
