"""Event service: CRUD, lifecycle transitions, ticket sales."""

import logging
import secrets
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mythra_engine.common.config import MythraSettings
from mythra_engine.common.exceptions import (
    ConcurrentModificationError,
    EventNotFoundError,
    MythraError,
    TicketSaleError,
    TransitionRejectedError,
)
from mythra_engine.dao.models import DAOQuestionModel, DAOVoteModel
from mythra_engine.events.models import EventModel, EventTransitionModel
from mythra_engine.investments.models import InvestmentModel
from mythra_engine.lifecycle.machine import (
    Actor,
    EventSnapshot,
    Financials,
    TransitionContext,
    TransitionResult,
    as_utc,
    request_transition,
)
from mythra_engine.lifecycle.states import EventStatus, Role
from mythra_engine.lifecycle.voting import VoteRecord
from mythra_engine.payouts.models import InvestorRoiModel, RoiDistributionModel
from mythra_engine.tickets.models import TicketModel

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = Actor(id="system", role=Role.SYSTEM)

_EDITABLE_FIELDS = (
    "name", "description", "venue", "start_time", "end_time",
    "price_sol", "max_tickets", "vault_cap", "creator_wallet",
)


def can_manage(event: EventModel, actor: Actor) -> bool:
    """Admins manage every event; organizers only their own."""
    if actor.role == Role.ADMIN:
        return True
    return actor.role == Role.ORGANIZER and actor.id == event.organizer_id


def to_snapshot(event: EventModel) -> EventSnapshot:
    return EventSnapshot(
        id=event.id,
        status=EventStatus.parse(event.status),
        organizer_id=event.organizer_id,
        creator_wallet=event.creator_wallet or "",
        name=event.name or "",
        venue=event.venue or "",
        start_time=as_utc(event.start_time),
        end_time=as_utc(event.end_time),
        price_sol=event.price_sol,
        max_tickets=event.max_tickets,
        tickets_sold=event.tickets_sold or 0,
        vault_cap=event.vault_cap,
        created_at=as_utc(event.created_at),
        updated_at=as_utc(event.updated_at),
    )


class EventService:
    """Event storage and the persistence side of the lifecycle."""

    def __init__(self, settings: MythraSettings, ledger=None):
        self.settings = settings
        self.ledger = ledger

    # ── CRUD ──

    async def create_event(
        self,
        session: AsyncSession,
        organizer_id: str,
        name: str,
        description: str = "",
        venue: str = "",
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        price_sol: Decimal | None = None,
        max_tickets: int | None = None,
        vault_cap: Decimal | None = None,
        creator_wallet: str = "",
    ) -> EventModel:
        """Create an event in ``draft``."""
        event = EventModel(
            organizer_id=organizer_id,
            name=name,
            description=description,
            venue=venue,
            start_time=start_time,
            end_time=end_time,
            price_sol=price_sol,
            max_tickets=max_tickets,
            vault_cap=vault_cap,
            creator_wallet=creator_wallet,
            status=EventStatus.DRAFT.value,
            tickets_sold=0,
            current_investment=Decimal("0"),
            version=1,
        )
        session.add(event)
        await session.flush()
        logger.info("Event %s created by organizer %s", event.id, organizer_id)
        return event

    async def get_by_id(self, session: AsyncSession, event_id: str) -> EventModel | None:
        return await session.get(EventModel, event_id)

    async def require_event(self, session: AsyncSession, event_id: str) -> EventModel:
        event = await self.get_by_id(session, event_id)
        if event is None:
            raise EventNotFoundError()
        return event

    async def list_events(
        self,
        session: AsyncSession,
        status: str | None = None,
        organizer_id: str | None = None,
    ) -> list[EventModel]:
        query = select(EventModel)
        if status is not None:
            query = query.where(EventModel.status == EventStatus.parse(status).value)
        if organizer_id is not None:
            query = query.where(EventModel.organizer_id == organizer_id)
        query = query.order_by(EventModel.created_at.desc())
        result = await session.execute(query)
        return list(result.scalars().all())

    async def update_draft(
        self, session: AsyncSession, event_id: str, actor: Actor, **updates: Any,
    ) -> EventModel:
        """Edit event details; only drafts are editable."""
        event = await self.require_event(session, event_id)
        if not can_manage(event, actor):
            raise MythraError("Not allowed to edit this event", code="FORBIDDEN")
        if EventStatus.parse(event.status) != EventStatus.DRAFT:
            raise MythraError("Only draft events can be edited", code="NOT_EDITABLE")
        for field in _EDITABLE_FIELDS:
            if field in updates and updates[field] is not None:
                setattr(event, field, updates[field])
        await session.flush()
        return event

    # ── Lifecycle ──

    async def build_context(
        self,
        session: AsyncSession,
        event: EventModel,
        financials: Financials | None = None,
        now: datetime | None = None,
    ) -> TransitionContext:
        """Read every guard input for ``event`` from the current session."""
        questions = await session.execute(
            select(DAOQuestionModel.id)
            .where(DAOQuestionModel.event_id == event.id)
            .order_by(DAOQuestionModel.order)
        )
        investors = await session.execute(
            select(InvestmentModel.investor_id)
            .where(InvestmentModel.event_id == event.id)
            .where(InvestmentModel.status == "confirmed")
        )
        votes = await session.execute(
            select(DAOVoteModel.investor_id, DAOVoteModel.question_id, DAOVoteModel.option_id)
            .where(DAOVoteModel.event_id == event.id)
        )

        investor_pool = None
        distributed = None
        dist = (await session.execute(
            select(RoiDistributionModel).where(RoiDistributionModel.event_id == event.id)
        )).scalar_one_or_none()
        if dist is not None and dist.status == "completed":
            rows = await session.execute(
                select(InvestorRoiModel.roi_amount)
                .where(InvestorRoiModel.distribution_id == dist.id)
                .where(InvestorRoiModel.paid.is_(True))
            )
            investor_pool = dist.investor_pool
            distributed = tuple(rows.scalars().all())

        return TransitionContext(
            question_ids=tuple(questions.scalars().all()),
            investor_ids=tuple(investors.scalars().all()),
            votes=tuple(VoteRecord(i, q, o) for i, q, o in votes.all()),
            financials=financials,
            investor_pool=investor_pool,
            distributed_amounts=distributed,
            now=now,
            allow_voting_without_investors=self.settings.allow_voting_without_investors,
        )

    async def preview_transition(
        self,
        session: AsyncSession,
        event_id: str,
        target: EventStatus | str,
        actor: Actor,
        financials: Financials | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        """Run the lifecycle against stored state without persisting."""
        event = await self.require_event(session, event_id)
        ctx = await self.build_context(session, event, financials=financials, now=now)
        return request_transition(to_snapshot(event), target, actor, ctx)

    async def transition(
        self,
        session: AsyncSession,
        event_id: str,
        target: EventStatus | str,
        actor: Actor,
        financials: Financials | None = None,
        note: str = "",
        now: datetime | None = None,
    ) -> tuple[EventModel, TransitionResult]:
        """Apply a lifecycle transition and persist it.

        Raises TransitionRejectedError when the lifecycle refuses, and
        ConcurrentModificationError when the row changed underneath us.
        """
        event = await self.require_event(session, event_id)
        ctx = await self.build_context(session, event, financials=financials, now=now)
        result = request_transition(to_snapshot(event), target, actor, ctx)
        if not result.ok:
            logger.warning(
                "Transition %s -> %s on event %s rejected: %s %s",
                event.status, target, event_id,
                result.error.value if result.error else "",
                result.reason.value if result.reason else "",
            )
            raise TransitionRejectedError(result)

        values: dict[str, Any] = {
            "status": result.target.value,
            "updated_at": result.event.updated_at,
            "version": event.version + 1,
        }
        if result.target == EventStatus.INVESTMENT_WINDOW:
            values["approved_by"] = actor.id
            values["approved_at"] = result.event.updated_at
        if result.target == EventStatus.REJECTED:
            values["rejected_reason"] = note or "Rejected by admin"

        stmt = (
            update(EventModel)
            .where(EventModel.id == event.id, EventModel.version == event.version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        outcome = await session.execute(stmt)
        if outcome.rowcount != 1:
            raise ConcurrentModificationError()

        session.add(EventTransitionModel(
            event_id=event.id,
            from_status=result.source.value,
            to_status=result.target.value,
            actor_id=actor.id,
            actor_role=actor.role.value,
            note=note,
        ))
        await session.flush()
        await session.refresh(event)

        if result.target == EventStatus.INVESTMENT_WINDOW and self.ledger is not None:
            receipt = await self.ledger.create_event(
                event.id, event.creator_wallet, event.max_tickets or 0,
            )
            event.chain_signature = receipt.signature
            await session.flush()

        logger.info(
            "Event %s moved %s -> %s by %s %s",
            event.id, result.source.value, result.target.value,
            actor.role.value, actor.id,
        )
        return event, result

    async def list_transitions(
        self, session: AsyncSession, event_id: str,
    ) -> list[EventTransitionModel]:
        result = await session.execute(
            select(EventTransitionModel)
            .where(EventTransitionModel.event_id == event_id)
            .order_by(EventTransitionModel.created_at.asc())
        )
        return list(result.scalars().all())

    async def advance_by_schedule(
        self, session: AsyncSession, now: datetime | None = None,
    ) -> list[tuple[str, EventStatus]]:
        """Start events whose start time passed and close those that ended.

        Returns (event_id, new_status) for every event moved.
        """
        now = now or datetime.now(timezone.utc)
        due = {
            EventStatus.WAITING_FOR_EVENT: EventStatus.EVENT_RUNNING,
            EventStatus.EVENT_RUNNING: EventStatus.CALCULATING_INCOME,
        }
        result = await session.execute(
            select(EventModel.id, EventModel.status)
            .where(EventModel.status.in_([s.value for s in due]))
        )
        moved = []
        for event_id, status in result.all():
            target = due[EventStatus.parse(status)]
            preview = await self.preview_transition(session, event_id, target, SYSTEM_ACTOR, now=now)
            if not preview.ok:
                continue
            await self.transition(session, event_id, target, SYSTEM_ACTOR, now=now)
            moved.append((event_id, target))
        return moved

    # ── Ticket sales ──

    async def sell_tickets(
        self,
        session: AsyncSession,
        event_id: str,
        quantity: int,
        buyer_id: str = "",
        buyer_wallet: str = "",
    ) -> tuple[EventModel, list[TicketModel]]:
        """Record a ticket purchase and issue one ticket per seat.

        Closes sales automatically when the event sells out.
        """
        if quantity <= 0:
            raise TicketSaleError("Quantity must be positive", code="INVALID_QUANTITY")
        event = await self.require_event(session, event_id)
        if EventStatus.parse(event.status) != EventStatus.SELLING_TICKETS:
            raise TicketSaleError("Tickets are not on sale for this event", code="NOT_ON_SALE")
        remaining = (event.max_tickets or 0) - event.tickets_sold
        if quantity > remaining:
            raise TicketSaleError(
                f"Only {remaining} ticket(s) remaining", code="INSUFFICIENT_TICKETS",
            )

        stmt = (
            update(EventModel)
            .where(EventModel.id == event.id, EventModel.version == event.version)
            .values(
                tickets_sold=event.tickets_sold + quantity,
                version=event.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        outcome = await session.execute(stmt)
        if outcome.rowcount != 1:
            raise ConcurrentModificationError()
        await session.refresh(event)

        tickets = [
            TicketModel(
                event_id=event.id,
                buyer_id=buyer_id or "anonymous",
                buyer_wallet=buyer_wallet,
                mint_address=f"MINT_{secrets.token_hex(16)}",
                price_sol=event.price_sol,
                status="unused",
            )
            for _ in range(quantity)
        ]
        session.add_all(tickets)
        await session.flush()
        logger.info("Sold %d ticket(s) for event %s to %s", quantity, event.id, buyer_id or "anonymous")

        if event.tickets_sold == event.max_tickets:
            event, _ = await self.transition(
                session, event.id, EventStatus.WAITING_FOR_EVENT, SYSTEM_ACTOR, note="sold out",
            )
        return event, tickets
