"""Pydantic schemas for ticket and check-in endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class TicketResponse(BaseModel):
    id: str
    event_id: str
    buyer_id: str
    buyer_wallet: str
    mint_address: str
    price_sol: Optional[Decimal] = None
    status: str
    used_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CheckInCreate(BaseModel):
    ticket: str = Field(..., min_length=1, description="Ticket id or mint address")
    event_id: Optional[str] = None
    signature: Optional[str] = Field(default=None, max_length=128)
    location: Optional[str] = Field(default=None, max_length=255)


class CheckInResponse(BaseModel):
    id: str
    ticket_id: str
    event_id: str
    staff_id: str
    signature: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
