"""
Outbox models.

Events are written to ``outbox_events`` in the same transaction as the state
change they describe and published afterwards by the dispatcher.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from launchline.core.models import Base, IDMixin, utc_now


class OutboxEvent(Base, IDMixin):
    """A domain event awaiting publication."""

    __tablename__ = "outbox_events"

    event_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Domain event discriminator"
    )

    topic: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bus channel the event is published on"
    )

    payload: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Serialized domain event"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    dispatched_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the event was published"
    )

    attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Failed publish attempts"
    )

    last_error: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Error from the most recent failed attempt"
    )

    __table_args__ = (
        Index("ix_outbox_events_pending", "dispatched_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<OutboxEvent(id={self.id}, event_type={self.event_type}, attempts={self.attempts})>"
