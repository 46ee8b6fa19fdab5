from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

# Use JSONB on Postgres, fallback to JSON for SQLite/test environments.
JSONType = JSON().with_variant(JSONB, "postgresql")

from mailstats.models.base import Base


class Domain(Base):
    """A sending domain as listed by the provider."""

    __tablename__ = "domains"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(253), nullable=False, unique=True, index=True)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    web_prefix: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # {code, note, permanently, reason}
    disabled: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    record_created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    record_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Event(Base):
    """A single delivery event (accepted/delivered/failed/...) for a domain."""

    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_domain_timestamp", "domain", "timestamp"),
        Index("ix_events_event", "event"),
    )

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    event: Mapped[str] = mapped_column(String(50), nullable=False)
    timestamp: Mapped[float] = mapped_column(Float, nullable=False)
    domain: Mapped[str] = mapped_column(String(253), nullable=False)
    recipient: Mapped[str | None] = mapped_column(String(320), nullable=True)
    message: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    delivery_status: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[str | None] = mapped_column(String(50), nullable=True)
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    storage: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    campaigns: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    user_variables: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    flags: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    routes: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    log_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    envelope: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    message_id: Mapped[str | None] = mapped_column(String(500), nullable=True)

    record_created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    record_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
