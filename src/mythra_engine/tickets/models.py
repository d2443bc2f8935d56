"""SQLAlchemy models for issued tickets and attendee check-ins."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from mythra_engine.common.models import Base, TimestampMixin, generate_uuid
from mythra_engine.events.models import SOL


class TicketModel(Base, TimestampMixin):
    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, index=True
    )
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    buyer_wallet: Mapped[str] = mapped_column(String(64), default="")
    mint_address: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    price_sol: Mapped[Decimal | None] = mapped_column(SOL, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="unused")
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CheckInModel(Base, TimestampMixin):
    __tablename__ = "checkins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    ticket_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tickets.id"), unique=True, nullable=False
    )
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, index=True
    )
    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    signature: Mapped[str | None] = mapped_column(String(128), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
