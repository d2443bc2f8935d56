"""
Event lifecycle states, actor roles and the transition table.

Every status comparison in the engine goes through ``EventStatus``; raw
strings from storage or requests are normalised with ``EventStatus.parse``
so legacy names never leak past the boundary.
"""

from dataclasses import dataclass
from enum import Enum


class EventStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    INVESTMENT_WINDOW = "investment_window"
    DAO_PROCESS = "dao_process"
    SELLING_TICKETS = "selling_tickets"
    WAITING_FOR_EVENT = "waiting_for_event"
    EVENT_RUNNING = "event_running"
    CALCULATING_INCOME = "calculating_income"
    ROI_DISTRIBUTION = "roi_distribution"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: "str | EventStatus") -> "EventStatus":
        """Resolve a status string, accepting deprecated aliases."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Event status must be a string, got {type(value).__name__}")
        normalized = value.strip().lower()
        normalized = LEGACY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown event status: {value!r}") from None

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


# Names written by older clients before the nine-stage lifecycle
LEGACY_ALIASES: dict[str, str] = {
    "approved": "investment_window",
    "dao_voting": "dao_process",
    "published": "selling_tickets",
    "live": "selling_tickets",
    "ongoing": "event_running",
}

TERMINAL_STATES: frozenset[EventStatus] = frozenset({
    EventStatus.COMPLETED,
    EventStatus.REJECTED,
    EventStatus.CANCELLED,
})

# Statuses in which organizers may still author or edit DAO questions
QUESTION_AUTHORING_STATES: frozenset[EventStatus] = frozenset({
    EventStatus.DRAFT,
    EventStatus.PENDING_APPROVAL,
    EventStatus.INVESTMENT_WINDOW,
})


class Role(str, Enum):
    ADMIN = "admin"
    ORGANIZER = "organizer"
    INVESTOR = "investor"
    SYSTEM = "system"


@dataclass(frozen=True)
class TransitionRule:
    """One edge of the lifecycle graph and who may take it.

    Organizers may only act on events they own; admins and the system
    scheduler are not ownership-checked.
    """
    source: EventStatus
    target: EventStatus
    roles: frozenset[Role]
    trigger: str


_OWNER_ADMIN = frozenset({Role.ORGANIZER, Role.ADMIN})
_OWNER_ADMIN_SYSTEM = frozenset({Role.ORGANIZER, Role.ADMIN, Role.SYSTEM})
_ADMIN = frozenset({Role.ADMIN})


def _build_table() -> dict[tuple[EventStatus, EventStatus], TransitionRule]:
    S = EventStatus
    rules = [
        TransitionRule(S.DRAFT, S.PENDING_APPROVAL, _OWNER_ADMIN, "organizer submits"),
        TransitionRule(S.PENDING_APPROVAL, S.INVESTMENT_WINDOW, _ADMIN, "admin approves"),
        TransitionRule(S.PENDING_APPROVAL, S.REJECTED, _ADMIN, "admin rejects"),
        TransitionRule(S.INVESTMENT_WINDOW, S.DAO_PROCESS, _OWNER_ADMIN_SYSTEM, "DAO voting opens"),
        TransitionRule(S.INVESTMENT_WINDOW, S.SELLING_TICKETS, _OWNER_ADMIN_SYSTEM, "no DAO questions, sales open"),
        TransitionRule(S.DAO_PROCESS, S.SELLING_TICKETS, _OWNER_ADMIN_SYSTEM, "voting complete"),
        TransitionRule(S.SELLING_TICKETS, S.WAITING_FOR_EVENT, _OWNER_ADMIN_SYSTEM, "sales closed"),
        TransitionRule(S.WAITING_FOR_EVENT, S.EVENT_RUNNING, _OWNER_ADMIN_SYSTEM, "event starts"),
        TransitionRule(S.EVENT_RUNNING, S.CALCULATING_INCOME, _OWNER_ADMIN_SYSTEM, "event ends"),
        TransitionRule(S.CALCULATING_INCOME, S.ROI_DISTRIBUTION, _OWNER_ADMIN, "financials submitted"),
        TransitionRule(S.ROI_DISTRIBUTION, S.COMPLETED, _OWNER_ADMIN_SYSTEM, "distribution executed"),
    ]
    table = {(r.source, r.target): r for r in rules}
    for status in S:
        if not status.is_terminal:
            table[(status, S.CANCELLED)] = TransitionRule(
                status, S.CANCELLED, _OWNER_ADMIN, "cancelled",
            )
    return table


TRANSITIONS: dict[tuple[EventStatus, EventStatus], TransitionRule] = _build_table()


def allowed_targets(source: EventStatus) -> list[EventStatus]:
    """Targets reachable from ``source`` in one step, in declaration order."""
    return [target for (src, target) in TRANSITIONS if src == source]
