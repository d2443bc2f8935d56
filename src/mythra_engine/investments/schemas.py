"""Pydantic schemas for investment endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class InvestmentCreate(BaseModel):
    amount_sol: Decimal = Field(..., gt=0)
    investor_wallet: str = Field(default="", max_length=64)
    transaction_signature: Optional[str] = Field(default=None, max_length=128)


class InvestmentResponse(BaseModel):
    id: str
    event_id: str
    investor_id: str
    investor_wallet: str
    amount_sol: Decimal
    status: str
    transaction_signature: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RecalculateResponse(BaseModel):
    event_id: str
    old_amount: Decimal
    new_amount: Decimal
    investment_count: int
