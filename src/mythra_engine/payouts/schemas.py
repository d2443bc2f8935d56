"""Pydantic schemas for payout endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class InvestmentInput(BaseModel):
    investment_id: str
    amount_sol: Decimal
    investor_id: str = ""


class PayoutPreviewRequest(BaseModel):
    total_revenue: Decimal
    total_costs: Decimal
    investor_share_percent: Decimal = Decimal("20")
    investments: list[InvestmentInput] = Field(default_factory=list)


class AllocationResponse(BaseModel):
    investment_id: str
    investor_id: str
    amount_sol: Decimal
    roi_amount: Decimal
    roi_percentage: Decimal
    total_return: Decimal


class PayoutPreviewResponse(BaseModel):
    total_revenue: Decimal
    total_costs: Decimal
    investor_share_percent: Decimal
    net_profit: Decimal
    investor_pool: Decimal
    organizer_retained: Decimal
    total_invested: Decimal
    total_roi: Decimal
    allocations: list[AllocationResponse]


class SplitRequest(BaseModel):
    total_revenue: Decimal = Field(..., ge=0)
    platform_fee_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)


class SplitResponse(BaseModel):
    total_revenue: Decimal
    platform_fee: Decimal
    organizer_amount: Decimal
    platform_fee_percent: Decimal


class DistributionCreate(BaseModel):
    total_revenue: Decimal = Field(..., ge=0)
    total_costs: Decimal = Field(..., ge=0)
    investor_share_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)


class InvestorRoiResponse(BaseModel):
    id: str
    investment_id: str
    investor_id: str
    investor_wallet: str
    investment_amount: Decimal
    roi_amount: Decimal
    roi_percentage: Decimal
    total_return: Decimal
    paid: bool
    transaction_signature: Optional[str] = None

    model_config = {"from_attributes": True}


class DistributionResponse(BaseModel):
    id: str
    event_id: str
    status: str
    total_revenue: Decimal
    total_costs: Decimal
    net_profit: Decimal
    investor_share_percent: Decimal
    investor_pool: Decimal
    organizer_retained: Decimal
    total_invested: Decimal
    platform_fee: Decimal
    organizer_payout: Decimal
    organizer_signature: Optional[str] = None
    executed_at: Optional[datetime] = None
    investors: list[InvestorRoiResponse] = Field(default_factory=list)


class ExecutionResponse(BaseModel):
    distribution: DistributionResponse
    paid: list[str]
    failed: list[str]
    completed: bool
