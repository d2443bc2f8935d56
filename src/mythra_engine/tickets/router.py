"""Tickets API router: issued tickets and door check-in."""

from fastapi import APIRouter, Depends

from mythra_engine.common.exceptions import MythraError
from mythra_engine.common.http import http_error
from mythra_engine.common.security import get_actor
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.tickets.schemas import CheckInCreate, CheckInResponse, TicketResponse

router = APIRouter()


def _get_service():
    from mythra_engine.deps import get_ticket_service
    return get_ticket_service()


def _get_db():
    from mythra_engine.deps import get_db
    return get_db()


@router.get("/events/{event_id}/tickets", response_model=list[TicketResponse])
async def list_event_tickets(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.events.require_event(session, event_id)
            tickets = await svc.list_for_event(session, event_id)
            return [TicketResponse.model_validate(t) for t in tickets]
    except MythraError as e:
        raise http_error(e)


@router.get("/buyers/{buyer_id}/tickets", response_model=list[TicketResponse])
async def list_buyer_tickets(buyer_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tickets = await svc.list_for_buyer(session, buyer_id)
        return [TicketResponse.model_validate(t) for t in tickets]


@router.get("/tickets/{ticket_ref}", response_model=TicketResponse)
async def get_ticket(ticket_ref: str):
    """Look a ticket up by id or mint address."""
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            ticket = await svc.get_ticket(session, ticket_ref)
            return TicketResponse.model_validate(ticket)
    except MythraError as e:
        raise http_error(e)


@router.post("/checkins", response_model=CheckInResponse, status_code=201)
async def check_in(body: CheckInCreate, actor: Actor = Depends(get_actor)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            checkin = await svc.check_in(
                session, body.ticket, actor,
                event_id=body.event_id,
                signature=body.signature,
                location=body.location,
            )
            return CheckInResponse.model_validate(checkin)
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/checkins", response_model=list[CheckInResponse])
async def list_checkins(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.events.require_event(session, event_id)
            checkins = await svc.list_checkins(session, event_id)
            return [CheckInResponse.model_validate(c) for c in checkins]
    except MythraError as e:
        raise http_error(e)
