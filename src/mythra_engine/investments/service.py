"""Investment service: accept and list investor contributions."""

import logging
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mythra_engine.common.config import MythraSettings
from mythra_engine.common.exceptions import ConcurrentModificationError, InvestmentError
from mythra_engine.events.models import EventModel
from mythra_engine.events.service import EventService
from mythra_engine.investments.models import InvestmentModel
from mythra_engine.lifecycle.states import EventStatus
from mythra_engine.payouts.calculator import to_decimal

logger = logging.getLogger(__name__)


class InvestmentService:
    """One investment per investor per event, bounded by the vault cap."""

    def __init__(self, settings: MythraSettings, events: EventService):
        self.settings = settings
        self.events = events

    async def invest(
        self,
        session: AsyncSession,
        event_id: str,
        investor_id: str,
        amount_sol: Decimal,
        investor_wallet: str = "",
        transaction_signature: str | None = None,
    ) -> InvestmentModel:
        """Record an investment while the event's investment window is open."""
        amount = to_decimal(amount_sol)
        if amount <= 0:
            raise InvestmentError("Investment amount must be greater than 0", code="INVALID_AMOUNT")

        event = await self.events.require_event(session, event_id)
        if EventStatus.parse(event.status) != EventStatus.INVESTMENT_WINDOW:
            raise InvestmentError(
                f"Event is not accepting investments (status '{event.status}')",
                code="EVENT_NOT_INVESTABLE",
            )

        existing = await self.get_investment(session, event_id, investor_id)
        if existing is not None:
            raise InvestmentError(
                "Investor has already invested in this event", code="DUPLICATE_INVESTMENT",
            )

        current = event.current_investment or Decimal("0")
        cap = event.vault_cap or Decimal("0")
        if cap > 0 and current + amount > cap:
            raise InvestmentError(
                f"Investment of {amount} SOL exceeds remaining vault capacity {cap - current} SOL",
                code="VAULT_CAP_EXCEEDED",
            )

        investment = InvestmentModel(
            event_id=event_id,
            investor_id=investor_id,
            investor_wallet=investor_wallet,
            amount_sol=amount,
            status="confirmed",
            transaction_signature=transaction_signature,
        )
        session.add(investment)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise InvestmentError(
                "Investor has already invested in this event", code="DUPLICATE_INVESTMENT",
            ) from exc

        # The cap was checked against this version of the row
        stmt = (
            update(EventModel)
            .where(
                EventModel.id == event.id,
                EventModel.version == event.version,
                EventModel.status == EventStatus.INVESTMENT_WINDOW.value,
            )
            .values(current_investment=current + amount, version=event.version + 1)
            .execution_options(synchronize_session=False)
        )
        outcome = await session.execute(stmt)
        if outcome.rowcount != 1:
            raise ConcurrentModificationError()
        await session.refresh(event)
        logger.info("Investor %s invested %s SOL in event %s", investor_id, amount, event_id)
        return investment

    async def get_investment(
        self, session: AsyncSession, event_id: str, investor_id: str,
    ) -> InvestmentModel | None:
        result = await session.execute(
            select(InvestmentModel).where(
                InvestmentModel.event_id == event_id,
                InvestmentModel.investor_id == investor_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_investments(
        self, session: AsyncSession, event_id: str,
    ) -> list[InvestmentModel]:
        result = await session.execute(
            select(InvestmentModel)
            .where(InvestmentModel.event_id == event_id)
            .order_by(InvestmentModel.created_at.asc())
        )
        return list(result.scalars().all())

    async def list_by_investor(
        self, session: AsyncSession, investor_id: str,
    ) -> list[InvestmentModel]:
        result = await session.execute(
            select(InvestmentModel)
            .where(InvestmentModel.investor_id == investor_id)
            .order_by(InvestmentModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def recalculate_total(
        self, session: AsyncSession, event_id: str,
    ) -> tuple[Decimal, Decimal, int]:
        """Rebuild the event's running investment total from stored rows.

        Returns (old_total, new_total, confirmed_investment_count).
        """
        event = await self.events.require_event(session, event_id)
        total, count = (await session.execute(
            select(func.coalesce(func.sum(InvestmentModel.amount_sol), 0), func.count(InvestmentModel.id))
            .where(InvestmentModel.event_id == event_id)
            .where(InvestmentModel.status == "confirmed")
        )).one()
        old = event.current_investment or Decimal("0")
        new = to_decimal(total).quantize(Decimal("0.000000001"))

        stmt = (
            update(EventModel)
            .where(EventModel.id == event.id, EventModel.version == event.version)
            .values(current_investment=new, version=event.version + 1)
            .execution_options(synchronize_session=False)
        )
        outcome = await session.execute(stmt)
        if outcome.rowcount != 1:
            raise ConcurrentModificationError()
        await session.refresh(event)
        logger.info("Event %s investment total recalculated: %s -> %s SOL", event_id, old, new)
        return old, new, count
