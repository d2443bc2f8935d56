"""Dependency injection singletons for Mythra-Engine."""

from mythra_engine.common.config import get_settings
from mythra_engine.common.database import DatabaseManager
from mythra_engine.dao.service import DAOService
from mythra_engine.events.service import EventService
from mythra_engine.investments.service import InvestmentService
from mythra_engine.ledger.client import HttpLedgerClient, LedgerClient, SimulatedLedger
from mythra_engine.payouts.service import PayoutService
from mythra_engine.stats.service import StatsService
from mythra_engine.tickets.service import TicketService

_db: DatabaseManager | None = None
_ledger: LedgerClient | None = None
_events: EventService | None = None
_investments: InvestmentService | None = None
_dao: DAOService | None = None
_payouts: PayoutService | None = None
_tickets: TicketService | None = None
_stats: StatsService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_ledger() -> LedgerClient:
    global _ledger
    if _ledger is None:
        settings = get_settings()
        if settings.ledger_url:
            _ledger = HttpLedgerClient(
                settings.ledger_url,
                token=settings.ledger_token,
                timeout=settings.ledger_timeout,
            )
        else:
            _ledger = SimulatedLedger()
    return _ledger


def get_event_service() -> EventService:
    global _events
    if _events is None:
        _events = EventService(get_settings(), ledger=get_ledger())
    return _events


def get_investment_service() -> InvestmentService:
    global _investments
    if _investments is None:
        _investments = InvestmentService(get_settings(), get_event_service())
    return _investments


def get_dao_service() -> DAOService:
    global _dao
    if _dao is None:
        _dao = DAOService(get_settings(), get_event_service())
    return _dao


def get_payout_service() -> PayoutService:
    global _payouts
    if _payouts is None:
        _payouts = PayoutService(get_settings(), get_event_service(), get_ledger())
    return _payouts


def get_ticket_service() -> TicketService:
    global _tickets
    if _tickets is None:
        _tickets = TicketService(get_settings(), get_event_service())
    return _tickets


def get_stats_service() -> StatsService:
    global _stats
    if _stats is None:
        _stats = StatsService(get_settings(), get_event_service())
    return _stats


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _ledger, _events, _investments, _dao, _payouts, _tickets, _stats
    _db = None
    _ledger = None
    _events = None
    _investments = None
    _dao = None
    _payouts = None
    _tickets = None
    _stats = None
