"""
Event lifecycle state machine.

``request_transition`` is a pure function: it takes an event snapshot, the
desired status, the acting identity and whatever supporting data the guard
for that edge needs, and returns either the updated snapshot or a
structured rejection. It never reads storage and never raises for a
rejected transition; callers persist the returned snapshot themselves and
must serialise concurrent transitions of the same event.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable

from mythra_engine.lifecycle.states import TRANSITIONS, EventStatus, Role, TransitionRule
from mythra_engine.lifecycle.voting import VoteRecord, VotingStatus, check_voting_complete
from mythra_engine.payouts.calculator import to_decimal


class TransitionError(str, Enum):
    INVALID_TRANSITION = "INVALID_TRANSITION"
    GUARD_FAILED = "GUARD_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"


class GuardReason(str, Enum):
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    NO_DAO_QUESTIONS = "NO_DAO_QUESTIONS"
    DAO_QUESTIONS_PENDING = "DAO_QUESTIONS_PENDING"
    VOTING_INCOMPLETE = "VOTING_INCOMPLETE"
    NO_INVESTORS = "NO_INVESTORS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    SALES_STILL_OPEN = "SALES_STILL_OPEN"
    EVENT_NOT_STARTED = "EVENT_NOT_STARTED"
    EVENT_NOT_ENDED = "EVENT_NOT_ENDED"
    MISSING_FINANCIALS = "MISSING_FINANCIALS"
    INVALID_FINANCIALS = "INVALID_FINANCIALS"
    DISTRIBUTION_MISSING = "DISTRIBUTION_MISSING"
    DISTRIBUTION_MISMATCH = "DISTRIBUTION_MISMATCH"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role


@dataclass(frozen=True)
class EventSnapshot:
    """The lifecycle-relevant fields of one event row."""
    id: str
    status: EventStatus
    organizer_id: str
    creator_wallet: str = ""
    name: str = ""
    venue: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None
    price_sol: Decimal | None = None
    max_tickets: int | None = None
    tickets_sold: int = 0
    vault_cap: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Financials:
    total_revenue: Decimal
    total_costs: Decimal
    investor_share_percent: Decimal


@dataclass(frozen=True)
class TransitionContext:
    """Supporting state supplied by the caller, read from one consistent snapshot."""
    question_ids: tuple[str, ...] = ()
    investor_ids: tuple[str, ...] = ()
    votes: tuple[VoteRecord, ...] = ()
    financials: Financials | None = None
    investor_pool: Decimal | None = None
    distributed_amounts: tuple[Decimal, ...] | None = None
    now: datetime | None = None
    allow_voting_without_investors: bool = False
    rounding_epsilon: Decimal = Decimal("0.000001")


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    source: EventStatus | None
    target: EventStatus | None
    event: EventSnapshot | None = None
    error: TransitionError | None = None
    reason: GuardReason | None = None
    message: str = ""
    voting: VotingStatus | None = None


@dataclass(frozen=True)
class GuardFailure:
    reason: GuardReason
    message: str
    voting: VotingStatus | None = None


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Guards ──

def _guard_submission(event: EventSnapshot, ctx: TransitionContext, actor: Actor, now: datetime):
    missing = []
    if not event.name or not event.name.strip():
        missing.append("name")
    if event.start_time is None:
        missing.append("start_time")
    if not event.venue or not event.venue.strip():
        missing.append("venue")
    if event.price_sol is None or event.price_sol < 0:
        missing.append("price_sol")
    if event.max_tickets is None or event.max_tickets <= 0:
        missing.append("max_tickets")
    if missing:
        return GuardFailure(
            GuardReason.MISSING_REQUIRED_FIELDS,
            f"Missing required fields: {', '.join(missing)}",
        )


def _guard_open_dao(event, ctx, actor, now):
    if not ctx.question_ids:
        return GuardFailure(
            GuardReason.NO_DAO_QUESTIONS,
            "DAO voting needs at least one question; events without questions go straight to ticket sales",
        )


def _guard_skip_dao(event, ctx, actor, now):
    if ctx.question_ids:
        return GuardFailure(
            GuardReason.DAO_QUESTIONS_PENDING,
            f"Event has {len(ctx.question_ids)} DAO question(s); open DAO voting first",
        )


def _guard_voting_complete(event, ctx, actor, now):
    status = check_voting_complete(ctx.question_ids, ctx.investor_ids, ctx.votes)
    if status.investor_count == 0:
        if ctx.allow_voting_without_investors:
            return None
        return GuardFailure(GuardReason.NO_INVESTORS, "No investors have voting rights on this event", status)
    if not status.all_voted:
        return GuardFailure(
            GuardReason.VOTING_INCOMPLETE,
            f"{status.total_votes} of {status.expected_votes} votes cast; "
            f"{len(status.pending_investors)} investor(s) still voting",
            status,
        )


def _guard_close_sales(event, ctx, actor, now):
    if event.max_tickets is None:
        return GuardFailure(GuardReason.MISSING_REQUIRED_FIELDS, "Event has no ticket capacity set")
    if event.tickets_sold > event.max_tickets:
        return GuardFailure(
            GuardReason.CAPACITY_EXCEEDED,
            f"{event.tickets_sold} tickets sold exceeds capacity {event.max_tickets}",
        )
    if actor.role == Role.SYSTEM and event.tickets_sold < event.max_tickets:
        return GuardFailure(
            GuardReason.SALES_STILL_OPEN,
            f"{event.max_tickets - event.tickets_sold} tickets remain; only the organizer may close sales early",
        )


def _guard_start(event, ctx, actor, now):
    start = as_utc(event.start_time)
    if start is None or now < start:
        return GuardFailure(GuardReason.EVENT_NOT_STARTED, "Event start time has not been reached")


def _guard_end(event, ctx, actor, now):
    end = as_utc(event.end_time)
    if end is not None and now < end:
        return GuardFailure(GuardReason.EVENT_NOT_ENDED, "Event end time has not been reached")


def _guard_financials(event, ctx, actor, now):
    if ctx.financials is None:
        return GuardFailure(GuardReason.MISSING_FINANCIALS, "Revenue and cost figures are required")
    try:
        revenue = to_decimal(ctx.financials.total_revenue)
        costs = to_decimal(ctx.financials.total_costs)
        share = to_decimal(ctx.financials.investor_share_percent)
    except ValueError as exc:
        return GuardFailure(GuardReason.INVALID_FINANCIALS, str(exc))
    if revenue < 0 or costs < 0:
        return GuardFailure(GuardReason.INVALID_FINANCIALS, "Revenue and costs must be non-negative")
    if not Decimal("0") <= share <= Decimal("100"):
        return GuardFailure(GuardReason.INVALID_FINANCIALS, "Investor share must be within 0-100 percent")


def _guard_distribution(event, ctx, actor, now):
    if ctx.investor_pool is None or ctx.distributed_amounts is None:
        return GuardFailure(GuardReason.DISTRIBUTION_MISSING, "No computed distribution supplied")
    total = sum(ctx.distributed_amounts, Decimal("0"))
    if total > ctx.investor_pool + ctx.rounding_epsilon:
        return GuardFailure(
            GuardReason.DISTRIBUTION_MISMATCH,
            f"Distributed {total} SOL exceeds investor pool {ctx.investor_pool} SOL",
        )


Guard = Callable[[EventSnapshot, TransitionContext, Actor, datetime], "GuardFailure | None"]

S = EventStatus
GUARDS: dict[tuple[EventStatus, EventStatus], Guard] = {
    (S.DRAFT, S.PENDING_APPROVAL): _guard_submission,
    (S.INVESTMENT_WINDOW, S.DAO_PROCESS): _guard_open_dao,
    (S.INVESTMENT_WINDOW, S.SELLING_TICKETS): _guard_skip_dao,
    (S.DAO_PROCESS, S.SELLING_TICKETS): _guard_voting_complete,
    (S.SELLING_TICKETS, S.WAITING_FOR_EVENT): _guard_close_sales,
    (S.WAITING_FOR_EVENT, S.EVENT_RUNNING): _guard_start,
    (S.EVENT_RUNNING, S.CALCULATING_INCOME): _guard_end,
    (S.CALCULATING_INCOME, S.ROI_DISTRIBUTION): _guard_financials,
    (S.ROI_DISTRIBUTION, S.COMPLETED): _guard_distribution,
}


def _authorized(rule: TransitionRule, event: EventSnapshot, actor: Actor) -> bool:
    if actor.role not in rule.roles:
        return False
    if actor.role == Role.ORGANIZER:
        return bool(actor.id) and actor.id == event.organizer_id
    return True


def request_transition(
    event: EventSnapshot,
    target: "EventStatus | str",
    actor: Actor,
    context: TransitionContext | None = None,
) -> TransitionResult:
    """
    Validate and apply a status change.

    Checks run in order: the edge exists, the actor may take it, the edge's
    guard holds. The first failure is returned.

    Returns:
        TransitionResult with ``event`` set to the new snapshot on success
    """
    ctx = context or TransitionContext()
    try:
        source = EventStatus.parse(event.status)
    except ValueError as exc:
        return TransitionResult(False, None, None, error=TransitionError.INVALID_TRANSITION, message=str(exc))
    try:
        dest = EventStatus.parse(target)
    except ValueError as exc:
        return TransitionResult(False, source, None, error=TransitionError.INVALID_TRANSITION, message=str(exc))

    rule = TRANSITIONS.get((source, dest))
    if rule is None:
        return TransitionResult(
            False, source, dest,
            error=TransitionError.INVALID_TRANSITION,
            message=f"Cannot move event from '{source.value}' to '{dest.value}'",
        )

    if not _authorized(rule, event, actor):
        return TransitionResult(
            False, source, dest,
            error=TransitionError.UNAUTHORIZED,
            message=f"Role '{actor.role.value}' may not perform '{rule.trigger}' on this event",
        )

    now = as_utc(ctx.now) or datetime.now(timezone.utc)
    guard = GUARDS.get((source, dest))
    failure = guard(event, ctx, actor, now) if guard is not None else None
    if failure is not None:
        return TransitionResult(
            False, source, dest,
            error=TransitionError.GUARD_FAILED,
            reason=failure.reason,
            message=failure.message,
            voting=failure.voting,
        )

    previous = as_utc(event.updated_at)
    updated_at = max(now, previous) if previous is not None else now
    return TransitionResult(
        True, source, dest,
        event=replace(event, status=dest, updated_at=updated_at),
        message=f"Event moved from '{source.value}' to '{dest.value}'",
    )
