"""Read-only dashboard figures for events, organizers and the platform."""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mythra_engine.common.config import MythraSettings
from mythra_engine.events.models import EventModel
from mythra_engine.events.service import EventService
from mythra_engine.investments.models import InvestmentModel
from mythra_engine.lifecycle.states import EventStatus
from mythra_engine.payouts.calculator import to_decimal
from mythra_engine.tickets.models import CheckInModel, TicketModel


class StatsService:
    """Aggregates over tickets, check-ins and investments."""

    def __init__(self, settings: MythraSettings, events: EventService):
        self.settings = settings
        self.events = events

    async def _ticket_totals(self, session: AsyncSession, *where) -> tuple[int, Decimal]:
        count, revenue = (await session.execute(
            select(
                func.count(TicketModel.id),
                func.coalesce(func.sum(TicketModel.price_sol), 0),
            ).where(*where)
        )).one()
        return count or 0, to_decimal(revenue)

    async def _checkin_count(self, session: AsyncSession, *where) -> int:
        result = await session.execute(select(func.count(CheckInModel.id)).where(*where))
        return result.scalar_one() or 0

    async def _investment_totals(self, session: AsyncSession, *where) -> tuple[int, Decimal]:
        investors, total = (await session.execute(
            select(
                func.count(func.distinct(InvestmentModel.investor_id)),
                func.coalesce(func.sum(InvestmentModel.amount_sol), 0),
            ).where(InvestmentModel.status == "confirmed", *where)
        )).one()
        return investors or 0, to_decimal(total)

    async def _status_counts(self, session: AsyncSession, *where) -> dict[str, int]:
        result = await session.execute(
            select(EventModel.status, func.count(EventModel.id).label("n"))
            .where(*where)
            .group_by(EventModel.status)
        )
        counts: dict[str, int] = {}
        for row in result:
            key = EventStatus.parse(row.status).value
            counts[key] = counts.get(key, 0) + row.n
        return counts

    async def event_stats(self, session: AsyncSession, event_id: str) -> dict:
        event = await self.events.require_event(session, event_id)
        _, revenue = await self._ticket_totals(session, TicketModel.event_id == event_id)
        checked_in = await self._checkin_count(session, CheckInModel.event_id == event_id)
        investors, invested = await self._investment_totals(
            session, InvestmentModel.event_id == event_id,
        )
        max_tickets = event.max_tickets or 0
        sold = event.tickets_sold or 0
        return {
            "event_id": event.id,
            "max_tickets": max_tickets,
            "tickets_sold": sold,
            "tickets_remaining": max(max_tickets - sold, 0),
            "ticket_revenue": revenue,
            "checked_in": checked_in,
            "check_in_rate": round(checked_in / sold * 100, 1) if sold else 0.0,
            "investor_count": investors,
            "total_invested": invested,
        }

    async def organizer_stats(self, session: AsyncSession, organizer_id: str) -> dict:
        owned = select(EventModel.id).where(EventModel.organizer_id == organizer_id)
        by_status = await self._status_counts(session, EventModel.organizer_id == organizer_id)
        sold, revenue = await self._ticket_totals(session, TicketModel.event_id.in_(owned))
        checkins = await self._checkin_count(session, CheckInModel.event_id.in_(owned))
        _, invested = await self._investment_totals(session, InvestmentModel.event_id.in_(owned))
        return {
            "organizer_id": organizer_id,
            "total_events": sum(by_status.values()),
            "events_by_status": by_status,
            "total_tickets_sold": sold,
            "ticket_revenue": revenue,
            "total_checkins": checkins,
            "total_invested": invested,
        }

    async def admin_stats(self, session: AsyncSession) -> dict:
        by_status = await self._status_counts(session)
        sold, revenue = await self._ticket_totals(session)
        checkins = await self._checkin_count(session)
        investors, invested = await self._investment_totals(session)
        return {
            "total_events": sum(by_status.values()),
            "events_by_status": by_status,
            "pending_approvals": by_status.get(EventStatus.PENDING_APPROVAL.value, 0),
            "total_tickets_sold": sold,
            "ticket_revenue": revenue,
            "total_checkins": checkins,
            "total_investors": investors,
            "total_invested": invested,
        }
