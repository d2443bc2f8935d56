"""Payouts API router: previews, revenue splits and ROI distributions."""

from fastapi import APIRouter, Depends, HTTPException

from mythra_engine.common.exceptions import MythraError
from mythra_engine.common.http import http_error
from mythra_engine.common.security import get_actor
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.payouts.calculator import (
    InvestmentShare,
    compute_distribution,
    compute_payout_split,
)
from mythra_engine.payouts.models import InvestorRoiModel, RoiDistributionModel
from mythra_engine.payouts.schemas import (
    AllocationResponse,
    DistributionCreate,
    DistributionResponse,
    ExecutionResponse,
    InvestorRoiResponse,
    PayoutPreviewRequest,
    PayoutPreviewResponse,
    SplitRequest,
    SplitResponse,
)

router = APIRouter()


def _get_service():
    from mythra_engine.deps import get_payout_service
    return get_payout_service()


def _get_db():
    from mythra_engine.deps import get_db
    return get_db()


def _distribution_response(
    dist: RoiDistributionModel, rows: list[InvestorRoiModel],
) -> DistributionResponse:
    return DistributionResponse(
        id=dist.id,
        event_id=dist.event_id,
        status=dist.status,
        total_revenue=dist.total_revenue,
        total_costs=dist.total_costs,
        net_profit=dist.net_profit,
        investor_share_percent=dist.investor_share_percent,
        investor_pool=dist.investor_pool,
        organizer_retained=dist.organizer_retained,
        total_invested=dist.total_invested,
        platform_fee=dist.platform_fee,
        organizer_payout=dist.organizer_payout,
        organizer_signature=dist.organizer_signature,
        executed_at=dist.executed_at,
        investors=[InvestorRoiResponse.model_validate(r) for r in rows],
    )


# ── Pure calculations ──

@router.post("/payouts/preview", response_model=PayoutPreviewResponse)
async def preview_payout(body: PayoutPreviewRequest):
    """Compute a distribution without touching storage or the ledger."""
    svc = _get_service()
    result = compute_distribution(
        body.total_revenue,
        body.total_costs,
        body.investor_share_percent,
        [InvestmentShare(i.investment_id, i.amount_sol, i.investor_id) for i in body.investments],
        places=svc.settings.roi_decimal_places,
    )
    if not result.ok:
        raise HTTPException(
            status_code=400,
            detail={"error": result.message, "code": result.error.value, "detail": ""},
        )
    b = result.breakdown
    return PayoutPreviewResponse(
        total_revenue=b.total_revenue,
        total_costs=b.total_costs,
        investor_share_percent=b.investor_share_percent,
        net_profit=b.net_profit,
        investor_pool=b.investor_pool,
        organizer_retained=b.organizer_retained,
        total_invested=b.total_invested,
        total_roi=b.total_roi,
        allocations=[
            AllocationResponse(
                investment_id=a.investment_id,
                investor_id=a.investor_id,
                amount_sol=a.amount_sol,
                roi_amount=a.roi_amount,
                roi_percentage=a.roi_percentage,
                total_return=a.total_return,
            )
            for a in b.allocations
        ],
    )


@router.post("/payouts/split", response_model=SplitResponse)
async def payout_split(body: SplitRequest):
    svc = _get_service()
    pct = body.platform_fee_percent
    if pct is None:
        pct = svc.settings.platform_fee_percent
    try:
        split = compute_payout_split(
            body.total_revenue, pct, places=svc.settings.roi_decimal_places,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=400, detail={"error": str(e), "code": "INVALID_INPUT", "detail": ""},
        )
    return SplitResponse(
        total_revenue=split.total_revenue,
        platform_fee=split.platform_fee,
        organizer_amount=split.organizer_amount,
        platform_fee_percent=split.platform_fee_percent,
    )


# ── Stored distributions ──

@router.post("/events/{event_id}/distribution", response_model=DistributionResponse, status_code=201)
async def create_distribution(
    event_id: str, body: DistributionCreate, actor: Actor = Depends(get_actor),
):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            dist, rows = await svc.create_distribution(
                session, event_id, actor,
                body.total_revenue, body.total_costs,
                investor_share_percent=body.investor_share_percent,
            )
            return _distribution_response(dist, rows)
    except MythraError as e:
        raise http_error(e)


@router.post("/events/{event_id}/distribution/execute", response_model=ExecutionResponse)
async def execute_distribution(event_id: str, actor: Actor = Depends(get_actor)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            report = await svc.execute_distribution(session, event_id, actor)
            _, rows = await svc.get_distribution(session, event_id)
            return ExecutionResponse(
                distribution=_distribution_response(report.distribution, rows),
                paid=report.paid,
                failed=report.failed,
                completed=report.completed,
            )
    except MythraError as e:
        raise http_error(e)


@router.get("/events/{event_id}/distribution", response_model=DistributionResponse)
async def get_distribution(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.events.require_event(session, event_id)
            dist, rows = await svc.get_distribution(session, event_id)
            if dist is None:
                raise HTTPException(status_code=404, detail="No distribution for this event")
            return _distribution_response(dist, rows)
    except MythraError as e:
        raise http_error(e)
