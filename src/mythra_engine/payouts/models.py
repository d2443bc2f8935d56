"""SQLAlchemy models for ROI distributions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from mythra_engine.common.models import Base, TimestampMixin, generate_uuid
from mythra_engine.events.models import SOL


class RoiDistributionModel(Base, TimestampMixin):
    __tablename__ = "roi_distributions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, unique=True, index=True
    )
    total_revenue: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    total_costs: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    net_profit: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    investor_share_percent: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False)
    investor_pool: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    organizer_retained: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    total_invested: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    organizer_payout: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    organizer_signature: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class InvestorRoiModel(Base, TimestampMixin):
    __tablename__ = "investor_rois"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    distribution_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("roi_distributions.id"), nullable=False, index=True
    )
    investment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("investments.id"), nullable=False
    )
    investor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    investor_wallet: Mapped[str] = mapped_column(String(64), default="")
    investment_amount: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    roi_amount: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    roi_percentage: Mapped[Decimal] = mapped_column(Numeric(9, 4), nullable=False)
    total_return: Mapped[Decimal] = mapped_column(SOL, nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, default=False)
    transaction_signature: Mapped[str | None] = mapped_column(String(128), nullable=True)
