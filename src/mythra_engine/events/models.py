"""SQLAlchemy models for events and their status history."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mythra_engine.common.models import Base, TimestampMixin, generate_uuid

SOL = Numeric(24, 9)


class EventModel(Base, TimestampMixin):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    venue: Mapped[str] = mapped_column(String(255), default="")
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    price_sol: Mapped[Decimal | None] = mapped_column(SOL, nullable=True)
    max_tickets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tickets_sold: Mapped[int] = mapped_column(Integer, default=0)
    vault_cap: Mapped[Decimal | None] = mapped_column(SOL, nullable=True)
    current_investment: Mapped[Decimal] = mapped_column(SOL, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(30), default="draft", index=True)
    organizer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    creator_wallet: Mapped[str] = mapped_column(String(64), default="")
    chain_signature: Mapped[str | None] = mapped_column(String(128), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class EventTransitionModel(Base, TimestampMixin):
    __tablename__ = "event_transitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, index=True
    )
    from_status: Mapped[str] = mapped_column(String(30), nullable=False)
    to_status: Mapped[str] = mapped_column(String(30), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(64), default="")
    actor_role: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str] = mapped_column(Text, default="")
