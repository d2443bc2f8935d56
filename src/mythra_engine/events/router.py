"""Events API router: CRUD, lifecycle transitions and ticket sales."""

from fastapi import APIRouter, Depends, HTTPException, Query

from mythra_engine.common.exceptions import MythraError
from mythra_engine.common.http import http_error
from mythra_engine.common.security import get_actor, require_api_key
from mythra_engine.events.schemas import (
    AdvancedEvent,
    AdvanceResponse,
    EventCreate,
    EventResponse,
    EventUpdate,
    TicketPurchase,
    TicketPurchaseResponse,
    TransitionRecord,
    TransitionRequest,
    TransitionResponse,
)
from mythra_engine.lifecycle.machine import Actor, Financials
from mythra_engine.lifecycle.states import EventStatus, Role
from mythra_engine.tickets.schemas import TicketResponse

router = APIRouter()


def _get_service():
    from mythra_engine.deps import get_event_service
    return get_event_service()


def _get_payouts():
    from mythra_engine.deps import get_payout_service
    return get_payout_service()


def _get_db():
    from mythra_engine.deps import get_db
    return get_db()


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(body: EventCreate, actor: Actor = Depends(get_actor)):
    if actor.role not in (Role.ORGANIZER, Role.ADMIN):
        raise HTTPException(status_code=403, detail="Only organizers can create events")
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        event = await svc.create_event(
            session, actor.id, body.name,
            description=body.description,
            venue=body.venue,
            start_time=body.start_time,
            end_time=body.end_time,
            price_sol=body.price_sol,
            max_tickets=body.max_tickets,
            vault_cap=body.vault_cap,
            creator_wallet=body.creator_wallet,
        )
        return EventResponse.model_validate(event)


@router.post("/events/advance", response_model=AdvanceResponse)
async def advance_events(_=Depends(require_api_key)):
    """Apply due start/end transitions as the system actor."""
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        moved = await svc.advance_by_schedule(session)
        return AdvanceResponse(
            moved=[AdvancedEvent(event_id=event_id, status=status.value) for event_id, status in moved],
        )


@router.get("/events", response_model=list[EventResponse])
async def list_events(
    status: str | None = Query(None),
    organizer_id: str | None = Query(None),
):
    if status is not None:
        try:
            EventStatus.parse(status)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        events = await svc.list_events(session, status=status, organizer_id=organizer_id)
        return [EventResponse.model_validate(e) for e in events]


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(event_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        event = await svc.get_by_id(session, event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")
        return EventResponse.model_validate(event)


@router.patch("/events/{event_id}", response_model=EventResponse)
async def update_event(event_id: str, body: EventUpdate, actor: Actor = Depends(get_actor)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            event = await svc.update_draft(
                session, event_id, actor, **body.model_dump(exclude_none=True)
            )
            return EventResponse.model_validate(event)
    except MythraError as e:
        raise http_error(e)


@router.post("/events/{event_id}/transition", response_model=TransitionResponse)
async def transition_event(
    event_id: str, body: TransitionRequest, actor: Actor = Depends(get_actor),
):
    """Request a lifecycle status change.

    Moving to ``roi_distribution`` with financials also computes and stores
    the ROI distribution, exactly like ``POST /events/{id}/distribution``.
    """
    svc = _get_service()
    db = _get_db()
    try:
        target = EventStatus.parse(body.target)
    except ValueError as e:
        raise HTTPException(
            status_code=409,
            detail={"error": str(e), "code": "INVALID_TRANSITION", "detail": ""},
        )
    try:
        async with db.get_session() as session:
            fin = body.financials
            if target == EventStatus.ROI_DISTRIBUTION and fin is not None:
                source = (await svc.require_event(session, event_id)).status
                await _get_payouts().create_distribution(
                    session, event_id, actor,
                    fin.total_revenue, fin.total_costs, fin.investor_share_percent,
                )
                event = await svc.require_event(session, event_id)
                return TransitionResponse(
                    event=EventResponse.model_validate(event),
                    source=EventStatus.parse(source).value,
                    target=target.value,
                    message=f"Event moved from '{EventStatus.parse(source).value}' to '{target.value}'",
                )

            financials = None
            if fin is not None:
                share = fin.investor_share_percent
                if share is None:
                    share = svc.settings.default_investor_share_percent
                financials = Financials(fin.total_revenue, fin.total_costs, share)
            event, result = await svc.transition(
                session, event_id, target, actor, financials=financials, note=body.note,
            )
            return TransitionResponse(
                event=EventResponse.model_validate(event),
                source=result.source.value,
                target=result.target.value,
                message=result.message,
            )
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/transitions", response_model=list[TransitionRecord])
async def list_transitions(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.require_event(session, event_id)
            rows = await svc.list_transitions(session, event_id)
            return [TransitionRecord.model_validate(r) for r in rows]
    except MythraError as e:
        raise http_error(e)


@router.post("/events/{event_id}/tickets", response_model=TicketPurchaseResponse)
async def buy_tickets(event_id: str, body: TicketPurchase, actor: Actor = Depends(get_actor)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            event, tickets = await svc.sell_tickets(
                session, event_id, body.quantity,
                buyer_id=actor.id, buyer_wallet=body.buyer_wallet,
            )
            return TicketPurchaseResponse(
                event=EventResponse.model_validate(event),
                quantity=body.quantity,
                remaining=(event.max_tickets or 0) - event.tickets_sold,
                tickets=[TicketResponse.model_validate(t) for t in tickets],
            )
    except MythraError as e:
        raise http_error(e)
