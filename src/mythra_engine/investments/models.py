"""SQLAlchemy model for event investments."""

from decimal import Decimal

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mythra_engine.common.models import Base, TimestampMixin, generate_uuid
from mythra_engine.events.models import SOL


class InvestmentModel(Base, TimestampMixin):
    __tablename__ = "investments"
    __table_args__ = (
        UniqueConstraint("event_id", "investor_id", name="uq_investment_event_investor"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, index=True
    )
    investor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    investor_wallet: Mapped[str] = mapped_column(String(64), default="")
    amount_sol: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="confirmed")
    transaction_signature: Mapped[str | None] = mapped_column(String(128), nullable=True)
