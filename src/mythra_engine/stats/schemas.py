"""Pydantic schemas for dashboard stats."""

from decimal import Decimal

from pydantic import BaseModel


class EventStatsResponse(BaseModel):
    event_id: str
    max_tickets: int
    tickets_sold: int
    tickets_remaining: int
    ticket_revenue: Decimal
    checked_in: int
    check_in_rate: float
    investor_count: int
    total_invested: Decimal


class OrganizerStatsResponse(BaseModel):
    organizer_id: str
    total_events: int
    events_by_status: dict[str, int]
    total_tickets_sold: int
    ticket_revenue: Decimal
    total_checkins: int
    total_invested: Decimal


class AdminStatsResponse(BaseModel):
    total_events: int
    events_by_status: dict[str, int]
    pending_approvals: int
    total_tickets_sold: int
    ticket_revenue: Decimal
    total_checkins: int
    total_investors: int
    total_invested: Decimal
