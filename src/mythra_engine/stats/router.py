"""Stats API router: event, organizer and platform dashboards."""

from fastapi import APIRouter, Depends

from mythra_engine.common.exceptions import MythraError
from mythra_engine.common.http import http_error
from mythra_engine.common.security import require_api_key
from mythra_engine.stats.schemas import (
    AdminStatsResponse,
    EventStatsResponse,
    OrganizerStatsResponse,
)

router = APIRouter()


def _get_service():
    from mythra_engine.deps import get_stats_service
    return get_stats_service()


def _get_db():
    from mythra_engine.deps import get_db
    return get_db()


@router.get("/events/{event_id}/stats", response_model=EventStatsResponse)
async def event_stats(event_id: str):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            return EventStatsResponse(**await svc.event_stats(session, event_id))
    except MythraError as e:
        raise http_error(e)


@router.get("/organizers/{organizer_id}/stats", response_model=OrganizerStatsResponse)
async def organizer_stats(organizer_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return OrganizerStatsResponse(**await svc.organizer_stats(session, organizer_id))


@router.get("/stats/admin", response_model=AdminStatsResponse)
async def admin_stats(_=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return AdminStatsResponse(**await svc.admin_stats(session))
