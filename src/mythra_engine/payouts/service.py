"""Payout service: persist ROI distributions and settle them on the ledger."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mythra_engine.common.config import MythraSettings
from mythra_engine.common.exceptions import DistributionError, LedgerError, TransitionRejectedError
from mythra_engine.events.service import EventService
from mythra_engine.investments.models import InvestmentModel
from mythra_engine.ledger.client import LedgerClient
from mythra_engine.lifecycle.machine import Actor, Financials, TransitionError
from mythra_engine.lifecycle.states import EventStatus
from mythra_engine.payouts.calculator import (
    InvestmentShare,
    compute_distribution,
    compute_payout_split,
)
from mythra_engine.payouts.models import InvestorRoiModel, RoiDistributionModel

logger = logging.getLogger(__name__)


@dataclass
class ExecutionReport:
    distribution: RoiDistributionModel
    paid: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    completed: bool = False


class PayoutService:
    """Turns computed breakdowns into stored records and ledger transfers."""

    def __init__(self, settings: MythraSettings, events: EventService, ledger: LedgerClient):
        self.settings = settings
        self.events = events
        self.ledger = ledger

    async def get_distribution(
        self, session: AsyncSession, event_id: str,
    ) -> tuple[RoiDistributionModel | None, list[InvestorRoiModel]]:
        dist = (await session.execute(
            select(RoiDistributionModel).where(RoiDistributionModel.event_id == event_id)
        )).scalar_one_or_none()
        if dist is None:
            return None, []
        rows = await session.execute(
            select(InvestorRoiModel)
            .where(InvestorRoiModel.distribution_id == dist.id)
            .order_by(InvestorRoiModel.created_at.asc())
        )
        return dist, list(rows.scalars().all())

    async def create_distribution(
        self,
        session: AsyncSession,
        event_id: str,
        actor: Actor,
        total_revenue: Decimal,
        total_costs: Decimal,
        investor_share_percent: Decimal | None = None,
    ) -> tuple[RoiDistributionModel, list[InvestorRoiModel]]:
        """Compute the split, move the event to ``roi_distribution`` and store it."""
        if investor_share_percent is None:
            investor_share_percent = self.settings.default_investor_share_percent

        existing, _ = await self.get_distribution(session, event_id)
        if existing is not None:
            raise DistributionError("Event already has an ROI distribution", code="ALREADY_DISTRIBUTED")

        financials = Financials(total_revenue, total_costs, investor_share_percent)
        preview = await self.events.preview_transition(
            session, event_id, EventStatus.ROI_DISTRIBUTION, actor, financials=financials,
        )
        if not preview.ok:
            raise TransitionRejectedError(preview)

        investments = list((await session.execute(
            select(InvestmentModel)
            .where(InvestmentModel.event_id == event_id)
            .where(InvestmentModel.status == "confirmed")
            .order_by(InvestmentModel.created_at.asc())
        )).scalars().all())

        result = compute_distribution(
            total_revenue,
            total_costs,
            investor_share_percent,
            [InvestmentShare(i.id, i.amount_sol, i.investor_id) for i in investments],
            places=self.settings.roi_decimal_places,
        )
        if not result.ok:
            logger.warning("Distribution for event %s refused: %s", event_id, result.message)
            raise DistributionError(result.message, code=result.error.value)
        breakdown = result.breakdown

        await self.events.transition(
            session, event_id, EventStatus.ROI_DISTRIBUTION, actor, financials=financials,
        )

        split = compute_payout_split(
            max(breakdown.organizer_retained, Decimal("0")),
            self.settings.platform_fee_percent,
            places=self.settings.roi_decimal_places,
        )
        dist = RoiDistributionModel(
            event_id=event_id,
            total_revenue=breakdown.total_revenue,
            total_costs=breakdown.total_costs,
            net_profit=breakdown.net_profit,
            investor_share_percent=breakdown.investor_share_percent,
            investor_pool=breakdown.investor_pool,
            organizer_retained=breakdown.organizer_retained,
            total_invested=breakdown.total_invested,
            platform_fee=split.platform_fee,
            organizer_payout=split.organizer_amount,
            status="pending",
        )
        session.add(dist)
        await session.flush()

        wallets = {i.id: i.investor_wallet for i in investments}
        rows = [
            InvestorRoiModel(
                distribution_id=dist.id,
                investment_id=a.investment_id,
                investor_id=a.investor_id,
                investor_wallet=wallets.get(a.investment_id, ""),
                investment_amount=a.amount_sol,
                roi_amount=a.roi_amount,
                roi_percentage=a.roi_percentage,
                total_return=a.total_return,
                paid=False,
            )
            for a in breakdown.allocations
        ]
        session.add_all(rows)
        await session.flush()
        logger.info(
            "ROI distribution %s for event %s: pool %s SOL across %d investment(s)",
            dist.id, event_id, breakdown.investor_pool, len(rows),
        )
        return dist, rows

    async def execute_distribution(
        self, session: AsyncSession, event_id: str, actor: Actor,
    ) -> ExecutionReport:
        """Transfer every unpaid return, then the organizer payout.

        Failed transfers stay unpaid and the event stays in
        ``roi_distribution``; running this again retries only those.
        """
        event = await self.events.require_event(session, event_id)
        dist, rows = await self.get_distribution(session, event_id)
        if dist is None:
            raise DistributionError("No ROI distribution exists for this event", code="NO_DISTRIBUTION")
        if EventStatus.parse(event.status) != EventStatus.ROI_DISTRIBUTION:
            raise DistributionError(
                f"Event is '{event.status}', not distributing ROI", code="NOT_DISTRIBUTING",
            )
        # Authorization is settled by the lifecycle before any value moves
        preview = await self.events.preview_transition(session, event_id, EventStatus.COMPLETED, actor)
        if preview.error == TransitionError.UNAUTHORIZED:
            raise DistributionError(preview.message, code="UNAUTHORIZED")

        report = ExecutionReport(distribution=dist)
        for row in rows:
            if row.paid:
                continue
            recipient = row.investor_wallet or row.investor_id
            try:
                receipt = await self.ledger.transfer_payout(
                    recipient, row.total_return, memo=f"roi:{dist.id}:{row.investment_id}",
                )
            except LedgerError as exc:
                logger.warning("ROI transfer to %s failed: %s", recipient, exc.message)
                report.failed.append(row.investor_id)
                continue
            row.paid = True
            row.transaction_signature = receipt.signature
            # Value has moved; a later failure must not roll this back
            await session.commit()
            report.paid.append(row.investor_id)

        if not report.failed and dist.organizer_signature is None and dist.organizer_payout > 0:
            recipient = event.creator_wallet or event.organizer_id
            try:
                receipt = await self.ledger.transfer_payout(
                    recipient, dist.organizer_payout, memo=f"organizer:{dist.id}",
                )
            except LedgerError as exc:
                logger.warning("Organizer payout to %s failed: %s", recipient, exc.message)
                report.failed.append(event.organizer_id)
            else:
                dist.organizer_signature = receipt.signature
                await session.commit()
        await session.flush()

        if report.failed:
            return report

        dist.status = "completed"
        dist.executed_at = datetime.now(timezone.utc)
        await session.flush()
        await self.events.transition(
            session, event_id, EventStatus.COMPLETED, actor, note="ROI distributed",
        )
        report.completed = True
        return report
