"""Service-level fixtures: in-memory DB, simulated ledger, lifecycle driver."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from mythra_engine.common.config import MythraSettings
from mythra_engine.common.database import DatabaseManager
from mythra_engine.dao.service import DAOService
from mythra_engine.events.service import EventService
from mythra_engine.investments.service import InvestmentService
from mythra_engine.ledger.client import SimulatedLedger
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import EventStatus, Role
from mythra_engine.payouts.service import PayoutService
from mythra_engine.stats.service import StatsService
from mythra_engine.tickets.service import TicketService

ORGANIZER = Actor("org-1", Role.ORGANIZER)
ADMIN = Actor("admin-1", Role.ADMIN)


def make_settings(**overrides) -> MythraSettings:
    defaults = {"db_url": "sqlite+aiosqlite://", "api_key": "test-admin-api-key"}
    defaults.update(overrides)
    return MythraSettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
async def file_db(tmp_path):
    """Separate connections per session, for interleaving tests."""
    manager = DatabaseManager(make_settings(db_url=f"sqlite+aiosqlite:///{tmp_path / 'mythra.db'}"))
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def ledger():
    return SimulatedLedger()


@dataclass
class Services:
    events: EventService
    investments: InvestmentService
    dao: DAOService
    payouts: PayoutService
    tickets: TicketService
    stats: StatsService


@pytest.fixture
def services(ledger):
    settings = make_settings()
    events = EventService(settings, ledger=ledger)
    return Services(
        events=events,
        investments=InvestmentService(settings, events),
        dao=DAOService(settings, events),
        payouts=PayoutService(settings, events, ledger),
        tickets=TicketService(settings, events),
        stats=StatsService(settings, events),
    )


class LifecycleDriver:
    """Walks events through the lifecycle, one committed session per step."""

    def __init__(self, db: DatabaseManager, services: Services):
        self.db = db
        self.svc = services

    async def create(self, **overrides) -> str:
        start = datetime.now(timezone.utc) + timedelta(days=10)
        fields = dict(
            name="Launch Night",
            venue="Warehouse 9",
            start_time=start,
            end_time=start + timedelta(hours=6),
            price_sol=Decimal("0.5"),
            max_tickets=10,
            vault_cap=Decimal("100"),
            creator_wallet="wallet-org",
        )
        fields.update(overrides)
        async with self.db.get_session() as session:
            event = await self.svc.events.create_event(session, ORGANIZER.id, **fields)
            return event.id

    async def get(self, event_id: str):
        async with self.db.get_session() as session:
            return await self.svc.events.require_event(session, event_id)

    async def move(self, event_id: str, target: EventStatus, actor: Actor = ORGANIZER, **kwargs):
        async with self.db.get_session() as session:
            event, _ = await self.svc.events.transition(session, event_id, target, actor, **kwargs)
            return event

    async def add_question(self, event_id: str, text: str = "Pick a headliner", options=("A", "B")):
        async with self.db.get_session() as session:
            return await self.svc.dao.create_question(
                session, event_id, ORGANIZER, text, list(options),
            )

    async def open_investment(self, event_id: str) -> None:
        await self.move(event_id, EventStatus.PENDING_APPROVAL)
        await self.move(event_id, EventStatus.INVESTMENT_WINDOW, ADMIN)

    async def invest(self, event_id: str, investor_id: str, amount, wallet: str = ""):
        async with self.db.get_session() as session:
            return await self.svc.investments.invest(
                session, event_id, investor_id, Decimal(str(amount)), investor_wallet=wallet,
            )

    async def on_sale(self, **overrides) -> str:
        event_id = await self.create(**overrides)
        await self.open_investment(event_id)
        await self.move(event_id, EventStatus.SELLING_TICKETS)
        return event_id

    async def sell(self, event_id: str, buyer_id: str, quantity: int = 1):
        async with self.db.get_session() as session:
            _, tickets = await self.svc.events.sell_tickets(
                session, event_id, quantity, buyer_id=buyer_id, buyer_wallet=f"wallet-{buyer_id}",
            )
            return tickets

    async def to_calculating_income(self, investments: dict[str, str]) -> str:
        """Create a past event with the given investments and close it out."""
        start = datetime.now(timezone.utc) - timedelta(days=2)
        event_id = await self.create(start_time=start, end_time=start + timedelta(hours=6))
        await self.open_investment(event_id)
        for investor_id, amount in investments.items():
            await self.invest(event_id, investor_id, amount, wallet=f"wallet-{investor_id}")
        await self.move(event_id, EventStatus.SELLING_TICKETS)
        await self.move(event_id, EventStatus.WAITING_FOR_EVENT)
        await self.move(event_id, EventStatus.EVENT_RUNNING)
        await self.move(event_id, EventStatus.CALCULATING_INCOME)
        return event_id


@pytest.fixture
def driver(db, services):
    return LifecycleDriver(db, services)


@pytest.fixture
def file_driver(file_db, services):
    return LifecycleDriver(file_db, services)
