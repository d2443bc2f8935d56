"""Ticket service: issued tickets and attendee check-in."""

import logging
from datetime import datetime, timezone

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mythra_engine.common.config import MythraSettings
from mythra_engine.common.exceptions import CheckInError, MythraError, TicketNotFoundError
from mythra_engine.events.service import EventService, can_manage
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import EventStatus
from mythra_engine.tickets.models import CheckInModel, TicketModel

logger = logging.getLogger(__name__)

CHECKIN_STATUSES = frozenset({
    EventStatus.SELLING_TICKETS,
    EventStatus.WAITING_FOR_EVENT,
    EventStatus.EVENT_RUNNING,
})


class TicketService:
    """Lookups over issued tickets and the door check-in flow."""

    def __init__(self, settings: MythraSettings, events: EventService):
        self.settings = settings
        self.events = events

    async def get_ticket(self, session: AsyncSession, ticket_ref: str) -> TicketModel:
        """Find a ticket by id or mint address."""
        result = await session.execute(
            select(TicketModel).where(
                or_(TicketModel.id == ticket_ref, TicketModel.mint_address == ticket_ref)
            )
        )
        ticket = result.scalar_one_or_none()
        if ticket is None:
            raise TicketNotFoundError()
        return ticket

    async def list_for_event(self, session: AsyncSession, event_id: str) -> list[TicketModel]:
        result = await session.execute(
            select(TicketModel)
            .where(TicketModel.event_id == event_id)
            .order_by(TicketModel.created_at.asc())
        )
        return list(result.scalars().all())

    async def list_for_buyer(self, session: AsyncSession, buyer_id: str) -> list[TicketModel]:
        result = await session.execute(
            select(TicketModel)
            .where(TicketModel.buyer_id == buyer_id)
            .order_by(TicketModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def check_in(
        self,
        session: AsyncSession,
        ticket_ref: str,
        staff: Actor,
        event_id: str | None = None,
        signature: str | None = None,
        location: str | None = None,
        now: datetime | None = None,
    ) -> CheckInModel:
        """Mark a ticket used and record who let the holder in.

        A ticket is admitted once. ``event_id``, when given, must be the
        ticket's event so a door cannot admit tickets for another event.
        """
        ticket = await self.get_ticket(session, ticket_ref)
        if ticket.status == "used":
            raise CheckInError("Ticket already used", code="TICKET_ALREADY_USED")
        if event_id and ticket.event_id != event_id:
            raise CheckInError(
                "Ticket does not belong to this event", code="TICKET_WRONG_EVENT",
            )

        event = await self.events.require_event(session, ticket.event_id)
        if not can_manage(event, staff):
            raise MythraError("Not allowed to check in tickets for this event", code="FORBIDDEN")
        if EventStatus.parse(event.status) not in CHECKIN_STATUSES:
            raise CheckInError(
                f"Check-in is closed for this event (status '{event.status}')",
                code="CHECKIN_CLOSED",
            )

        now = now or datetime.now(timezone.utc)
        stmt = (
            update(TicketModel)
            .where(TicketModel.id == ticket.id, TicketModel.status == "unused")
            .values(status="used", used_at=now)
            .execution_options(synchronize_session=False)
        )
        outcome = await session.execute(stmt)
        if outcome.rowcount != 1:
            raise CheckInError("Ticket already used", code="TICKET_ALREADY_USED")

        checkin = CheckInModel(
            ticket_id=ticket.id,
            event_id=ticket.event_id,
            staff_id=staff.id,
            signature=signature,
            location=location,
        )
        session.add(checkin)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise CheckInError("Ticket already used", code="TICKET_ALREADY_USED") from exc
        await session.refresh(ticket)

        logger.info(
            "Ticket %s checked in for event %s by %s", ticket.id, ticket.event_id, staff.id,
        )
        return checkin

    async def list_checkins(self, session: AsyncSession, event_id: str) -> list[CheckInModel]:
        result = await session.execute(
            select(CheckInModel)
            .where(CheckInModel.event_id == event_id)
            .order_by(CheckInModel.created_at.desc())
        )
        return list(result.scalars().all())
