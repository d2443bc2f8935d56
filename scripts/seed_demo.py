#!/usr/bin/env python3
"""Seed the database with a demo event open for investment.

Usage:
    python -m scripts.seed_demo
    # or from project root:
    python scripts/seed_demo.py
"""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from mythra_engine.common.config import get_settings
from mythra_engine.common.database import DatabaseManager
from mythra_engine.dao.service import DAOService
from mythra_engine.events.service import EventService
from mythra_engine.ledger.client import SimulatedLedger
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import EventStatus, Role

ORGANIZER = Actor("demo-organizer", Role.ORGANIZER)
ADMIN = Actor("demo-admin", Role.ADMIN)

DEMO_QUESTIONS = [
    ("Which headliner should open the night?", ["Aurora Set", "Night Owls", "Static Bloom"]),
    ("Should the after-party be included in the ticket?", ["Yes", "No"]),
]


async def seed_demo() -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    await db.create_all()

    events = EventService(settings, ledger=SimulatedLedger())
    dao = DAOService(settings, events)

    async with db.get_session() as session:
        start = datetime.now(timezone.utc) + timedelta(days=30)
        event = await events.create_event(
            session, ORGANIZER.id, "Mythra Launch Night",
            description="Demo event seeded for local development",
            venue="Warehouse 9",
            start_time=start,
            end_time=start + timedelta(hours=6),
            price_sol=Decimal("0.5"),
            max_tickets=500,
            vault_cap=Decimal("100"),
            creator_wallet="DemoOrganizerWallet1111111111111111111111111",
        )
        for text, options in DEMO_QUESTIONS:
            await dao.create_question(session, event.id, ORGANIZER, text, options)
            print(f"  [question] {text}")

        await events.transition(session, event.id, EventStatus.PENDING_APPROVAL, ORGANIZER)
        await events.transition(session, event.id, EventStatus.INVESTMENT_WINDOW, ADMIN)
        print(f"  [event] {event.id} ({event.name}) -> {event.status}")

    await db.close()
    print("\nDone. Demo event is open for investment.")


if __name__ == "__main__":
    asyncio.run(seed_demo())
