"""Mythra-Engine: event lifecycle, DAO voting and investor ROI payouts."""

from mythra_engine.lifecycle.machine import (
    Actor,
    EventSnapshot,
    TransitionContext,
    TransitionResult,
    request_transition,
)
from mythra_engine.lifecycle.states import EventStatus, Role
from mythra_engine.lifecycle.voting import check_voting_complete, tally_results
from mythra_engine.payouts.calculator import compute_distribution, compute_payout_split

__all__ = [
    "Actor",
    "EventSnapshot",
    "EventStatus",
    "Role",
    "TransitionContext",
    "TransitionResult",
    "request_transition",
    "check_voting_complete",
    "tally_results",
    "compute_distribution",
    "compute_payout_split",
]
__version__ = "0.1.0"
