"""Pydantic schemas for event endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from mythra_engine.tickets.schemas import TicketResponse


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    venue: str = Field(default="", max_length=255)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price_sol: Optional[Decimal] = Field(default=None, ge=0)
    max_tickets: Optional[int] = Field(default=None, ge=1)
    vault_cap: Optional[Decimal] = Field(default=None, ge=0)
    creator_wallet: str = Field(default="", max_length=64)


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    venue: Optional[str] = Field(default=None, max_length=255)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price_sol: Optional[Decimal] = Field(default=None, ge=0)
    max_tickets: Optional[int] = Field(default=None, ge=1)
    vault_cap: Optional[Decimal] = Field(default=None, ge=0)
    creator_wallet: Optional[str] = Field(default=None, max_length=64)


class EventResponse(BaseModel):
    id: str
    name: str
    description: str
    venue: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price_sol: Optional[Decimal] = None
    max_tickets: Optional[int] = None
    tickets_sold: int
    vault_cap: Optional[Decimal] = None
    current_investment: Decimal
    status: str
    organizer_id: str
    creator_wallet: str
    chain_signature: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FinancialsInput(BaseModel):
    total_revenue: Decimal = Field(..., ge=0)
    total_costs: Decimal = Field(..., ge=0)
    investor_share_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)


class TransitionRequest(BaseModel):
    target: str = Field(..., min_length=1)
    note: str = ""
    financials: Optional[FinancialsInput] = None


class TransitionResponse(BaseModel):
    event: EventResponse
    source: str
    target: str
    message: str


class TransitionRecord(BaseModel):
    id: str
    from_status: str
    to_status: str
    actor_id: str
    actor_role: str
    note: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TicketPurchase(BaseModel):
    quantity: int = Field(default=1, ge=1)
    buyer_wallet: str = Field(default="", max_length=64)


class TicketPurchaseResponse(BaseModel):
    event: EventResponse
    quantity: int
    remaining: int
    tickets: list[TicketResponse] = []


class AdvancedEvent(BaseModel):
    event_id: str
    status: str


class AdvanceResponse(BaseModel):
    moved: list[AdvancedEvent]
