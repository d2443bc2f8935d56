"""Investments API router."""

from fastapi import APIRouter, Depends, HTTPException

from mythra_engine.common.exceptions import MythraError
from mythra_engine.common.http import http_error
from mythra_engine.common.security import get_actor, require_api_key
from mythra_engine.investments.schemas import (
    InvestmentCreate,
    InvestmentResponse,
    RecalculateResponse,
)
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import Role

router = APIRouter()


def _get_service():
    from mythra_engine.deps import get_investment_service
    return get_investment_service()


def _get_db():
    from mythra_engine.deps import get_db
    return get_db()


@router.post("/events/{event_id}/investments", response_model=InvestmentResponse, status_code=201)
async def invest(event_id: str, body: InvestmentCreate, actor: Actor = Depends(get_actor)):
    if actor.role != Role.INVESTOR:
        raise HTTPException(status_code=403, detail="Only investors can invest")
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            investment = await svc.invest(
                session, event_id, actor.id, body.amount_sol,
                investor_wallet=body.investor_wallet,
                transaction_signature=body.transaction_signature,
            )
            return InvestmentResponse.model_validate(investment)
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/investments", response_model=list[InvestmentResponse])
async def list_investments(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.events.require_event(session, event_id)
            investments = await svc.list_investments(session, event_id)
            return [InvestmentResponse.model_validate(i) for i in investments]
    except MythraError as e:
        raise http_error(e)


@router.get("/investors/{investor_id}/investments", response_model=list[InvestmentResponse])
async def list_investor_portfolio(investor_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        investments = await svc.list_by_investor(session, investor_id)
        return [InvestmentResponse.model_validate(i) for i in investments]


@router.post("/events/{event_id}/recalculate-investment", response_model=RecalculateResponse)
async def recalculate_investment(event_id: str, _=Depends(require_api_key)):
    """Rebuild the event's investment total from confirmed investments."""
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            old, new, count = await svc.recalculate_total(session, event_id)
            return RecalculateResponse(
                event_id=event_id, old_amount=old, new_amount=new, investment_count=count,
            )
    except MythraError as e:
        raise http_error(e)
