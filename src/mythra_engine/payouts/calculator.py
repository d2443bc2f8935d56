"""
ROI distribution and revenue split arithmetic.

All amounts are ``Decimal``. Per-investor ROI is rounded half-up to a fixed
number of places and the rounding residual is folded into the largest
allocation, so the allocations always sum to the investor pool exactly.
Nothing here touches the database or the ledger.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Iterable

DEFAULT_PLACES = 6
_WORKING_PRECISION = 50


class PayoutErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    NO_INVESTORS_TO_DISTRIBUTE_TO = "NO_INVESTORS_TO_DISTRIBUTE_TO"
    ROUNDING_RESIDUAL_OVERFLOW = "ROUNDING_RESIDUAL_OVERFLOW"


@dataclass(frozen=True)
class InvestmentShare:
    investment_id: str
    amount_sol: Decimal
    investor_id: str = ""


@dataclass(frozen=True)
class InvestorAllocation:
    investment_id: str
    investor_id: str
    amount_sol: Decimal
    roi_amount: Decimal
    roi_percentage: Decimal
    total_return: Decimal


@dataclass(frozen=True)
class PayoutBreakdown:
    total_revenue: Decimal
    total_costs: Decimal
    investor_share_percent: Decimal
    net_profit: Decimal
    investor_pool: Decimal
    organizer_retained: Decimal
    total_invested: Decimal
    allocations: tuple[InvestorAllocation, ...]

    @property
    def total_roi(self) -> Decimal:
        return sum((a.roi_amount for a in self.allocations), Decimal("0"))


@dataclass(frozen=True)
class DistributionResult:
    ok: bool
    breakdown: PayoutBreakdown | None = None
    error: PayoutErrorCode | None = None
    message: str = ""


@dataclass(frozen=True)
class PayoutSplit:
    total_revenue: Decimal
    platform_fee: Decimal
    organizer_amount: Decimal
    platform_fee_percent: Decimal


def to_decimal(value) -> Decimal:
    """Coerce ints, strings, floats and Decimals; floats go through ``str``."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError("Boolean is not a monetary amount")
    elif isinstance(value, (int, str)):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ValueError(f"Cannot convert {type(value).__name__} to Decimal")
    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def _fail(code: PayoutErrorCode, message: str) -> DistributionResult:
    return DistributionResult(ok=False, error=code, message=message)


def compute_distribution(
    total_revenue,
    total_costs,
    investor_share_percent,
    investments: Iterable[InvestmentShare],
    places: int = DEFAULT_PLACES,
) -> DistributionResult:
    """
    Split net profit between the organizer and the event's investors.

    Args:
        total_revenue: Gross event revenue (>= 0)
        total_costs: Event costs (>= 0)
        investor_share_percent: Share of net profit owed to investors, 0-100
        investments: One entry per investment; amounts must be positive
        places: Decimal places of each ROI amount

    Returns:
        DistributionResult holding a PayoutBreakdown, or the failure code.
        A loss-making event yields a zero pool; investors never absorb
        losses beyond receiving no ROI.
    """
    try:
        revenue = to_decimal(total_revenue)
        costs = to_decimal(total_costs)
        share = to_decimal(investor_share_percent)
        shares = [
            InvestmentShare(inv.investment_id, to_decimal(inv.amount_sol), inv.investor_id)
            for inv in investments
        ]
    except (ValueError, InvalidOperation) as exc:
        return _fail(PayoutErrorCode.INVALID_INPUT, str(exc))

    if revenue < 0:
        return _fail(PayoutErrorCode.INVALID_INPUT, "total_revenue must be >= 0")
    if costs < 0:
        return _fail(PayoutErrorCode.INVALID_INPUT, "total_costs must be >= 0")
    if not Decimal("0") <= share <= Decimal("100"):
        return _fail(PayoutErrorCode.INVALID_INPUT, "investor_share_percent must be within 0-100")
    if places < 0:
        return _fail(PayoutErrorCode.INVALID_INPUT, "places must be >= 0")
    for inv in shares:
        if inv.amount_sol <= 0:
            return _fail(
                PayoutErrorCode.INVALID_INPUT,
                f"Investment {inv.investment_id} has non-positive amount {inv.amount_sol}",
            )

    q = _quantum(places)
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION

        net_profit = revenue - costs
        distributable = max(net_profit, Decimal("0"))
        investor_pool = (distributable * share / 100).quantize(q, rounding=ROUND_HALF_UP)
        organizer_retained = net_profit - investor_pool
        total_invested = sum((inv.amount_sol for inv in shares), Decimal("0"))

        if total_invested == 0 and investor_pool > 0:
            return _fail(
                PayoutErrorCode.NO_INVESTORS_TO_DISTRIBUTE_TO,
                f"Investor pool of {investor_pool} SOL has no investments to distribute to",
            )

        roi = [
            (investor_pool * inv.amount_sol / total_invested).quantize(q, rounding=ROUND_HALF_UP)
            for inv in shares
        ]
        residual = investor_pool - sum(roi, Decimal("0"))
        if residual and shares:
            # Each rounding step moves at most half a quantum
            if abs(residual) > q * len(shares):
                return _fail(
                    PayoutErrorCode.ROUNDING_RESIDUAL_OVERFLOW,
                    f"Rounding residual {residual} exceeds tolerance",
                )
            largest = max(range(len(shares)), key=lambda i: (shares[i].amount_sol, -i))
            roi[largest] += residual
            if roi[largest] < 0:
                return _fail(
                    PayoutErrorCode.ROUNDING_RESIDUAL_OVERFLOW,
                    "Residual correction would make an allocation negative",
                )
        if shares and sum(roi, Decimal("0")) != investor_pool:
            return _fail(
                PayoutErrorCode.ROUNDING_RESIDUAL_OVERFLOW,
                "Allocations do not sum to the investor pool",
            )

        allocations = tuple(
            InvestorAllocation(
                investment_id=inv.investment_id,
                investor_id=inv.investor_id,
                amount_sol=inv.amount_sol,
                roi_amount=amount,
                roi_percentage=(inv.amount_sol / total_invested * 100).quantize(
                    Decimal("0.0001"), rounding=ROUND_HALF_UP
                ),
                total_return=inv.amount_sol + amount,
            )
            for inv, amount in zip(shares, roi)
        )

    return DistributionResult(
        ok=True,
        breakdown=PayoutBreakdown(
            total_revenue=revenue,
            total_costs=costs,
            investor_share_percent=share,
            net_profit=net_profit,
            investor_pool=investor_pool,
            organizer_retained=organizer_retained,
            total_invested=total_invested,
            allocations=allocations,
        ),
    )


def compute_payout_split(
    total_revenue,
    platform_fee_percent=Decimal("5"),
    places: int = DEFAULT_PLACES,
) -> PayoutSplit:
    """Split ticket revenue into the platform fee and the organizer payout.

    Raises ValueError on negative revenue or a fee outside 0-100.
    """
    revenue = to_decimal(total_revenue)
    pct = to_decimal(platform_fee_percent)
    if revenue < 0:
        raise ValueError("total_revenue must be >= 0")
    if not Decimal("0") <= pct <= Decimal("100"):
        raise ValueError("platform_fee_percent must be within 0-100")

    fee = (revenue * pct / 100).quantize(_quantum(places), rounding=ROUND_HALF_UP)
    return PayoutSplit(
        total_revenue=revenue,
        platform_fee=fee,
        organizer_amount=revenue - fee,
        platform_fee_percent=pct,
    )
