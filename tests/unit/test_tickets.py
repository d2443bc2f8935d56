"""Tests for issued tickets and door check-in."""

from datetime import datetime, timedelta, timezone

import pytest

from mythra_engine.common.exceptions import CheckInError, MythraError, TicketNotFoundError
from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import EventStatus, Role

ORGANIZER = Actor("org-1", Role.ORGANIZER)
OTHER = Actor("org-2", Role.ORGANIZER)
ADMIN = Actor("admin-1", Role.ADMIN)


def _past_start():
    start = datetime.now(timezone.utc) - timedelta(days=2)
    return {"start_time": start, "end_time": start + timedelta(hours=6)}


class TestIssuedTickets:
    async def test_lookup_by_id_and_mint(self, db, services, driver):
        event_id = await driver.on_sale()
        [ticket] = await driver.sell(event_id, "fan-1")
        async with db.get_session() as session:
            by_id = await services.tickets.get_ticket(session, ticket.id)
            by_mint = await services.tickets.get_ticket(session, ticket.mint_address)
        assert by_id.id == by_mint.id == ticket.id
        assert by_id.buyer_wallet == "wallet-fan-1"
        assert by_id.price_sol == ticket.price_sol

    async def test_unknown_ticket(self, db, services):
        with pytest.raises(TicketNotFoundError):
            async with db.get_session() as session:
                await services.tickets.get_ticket(session, "MINT_nothing")

    async def test_lists(self, db, services, driver):
        event_id = await driver.on_sale()
        await driver.sell(event_id, "fan-1", 2)
        await driver.sell(event_id, "fan-2")
        async with db.get_session() as session:
            for_event = await services.tickets.list_for_event(session, event_id)
            for_fan = await services.tickets.list_for_buyer(session, "fan-1")
        assert len(for_event) == 3
        assert len(for_fan) == 2
        assert all(t.event_id == event_id for t in for_fan)


class TestCheckIn:
    async def test_check_in_marks_ticket_used(self, db, services, driver):
        event_id = await driver.on_sale()
        [ticket] = await driver.sell(event_id, "fan-1")
        async with db.get_session() as session:
            checkin = await services.tickets.check_in(
                session, ticket.mint_address, ORGANIZER,
                event_id=event_id, signature="sig-door", location="Gate A",
            )
        assert checkin.ticket_id == ticket.id
        assert checkin.staff_id == "org-1"
        assert checkin.location == "Gate A"
        async with db.get_session() as session:
            stored = await services.tickets.get_ticket(session, ticket.id)
            checkins = await services.tickets.list_checkins(session, event_id)
        assert stored.status == "used"
        assert stored.used_at is not None
        assert [c.ticket_id for c in checkins] == [ticket.id]

    async def test_second_check_in_refused(self, db, services, driver):
        event_id = await driver.on_sale()
        [ticket] = await driver.sell(event_id, "fan-1")
        async with db.get_session() as session:
            await services.tickets.check_in(session, ticket.id, ORGANIZER)
        with pytest.raises(CheckInError) as exc:
            async with db.get_session() as session:
                await services.tickets.check_in(session, ticket.id, ADMIN)
        assert exc.value.code == "TICKET_ALREADY_USED"
        async with db.get_session() as session:
            assert len(await services.tickets.list_checkins(session, event_id)) == 1

    async def test_wrong_event(self, db, services, driver):
        event_id = await driver.on_sale()
        other_id = await driver.on_sale()
        [ticket] = await driver.sell(event_id, "fan-1")
        with pytest.raises(CheckInError) as exc:
            async with db.get_session() as session:
                await services.tickets.check_in(session, ticket.id, ORGANIZER, event_id=other_id)
        assert exc.value.code == "TICKET_WRONG_EVENT"
        async with db.get_session() as session:
            assert (await services.tickets.get_ticket(session, ticket.id)).status == "unused"

    async def test_other_organizer_forbidden(self, db, services, driver):
        event_id = await driver.on_sale()
        [ticket] = await driver.sell(event_id, "fan-1")
        with pytest.raises(MythraError) as exc:
            async with db.get_session() as session:
                await services.tickets.check_in(session, ticket.id, OTHER)
        assert exc.value.code == "FORBIDDEN"

    async def test_closed_after_event(self, db, services, driver):
        event_id = await driver.on_sale(**_past_start())
        [ticket] = await driver.sell(event_id, "fan-1")
        await driver.move(event_id, EventStatus.WAITING_FOR_EVENT)
        await driver.move(event_id, EventStatus.EVENT_RUNNING)
        await driver.move(event_id, EventStatus.CALCULATING_INCOME)
        with pytest.raises(CheckInError) as exc:
            async with db.get_session() as session:
                await services.tickets.check_in(session, ticket.id, ORGANIZER)
        assert exc.value.code == "CHECKIN_CLOSED"

    async def test_running_event_admits(self, db, services, driver):
        event_id = await driver.on_sale(**_past_start())
        [ticket] = await driver.sell(event_id, "fan-1")
        await driver.move(event_id, EventStatus.WAITING_FOR_EVENT)
        await driver.move(event_id, EventStatus.EVENT_RUNNING)
        async with db.get_session() as session:
            checkin = await services.tickets.check_in(session, ticket.id, ORGANIZER)
        assert checkin.event_id == event_id


class TestInterleavedCheckIn:
    async def test_stale_read_cannot_admit_twice(self, file_db, services, file_driver):
        event_id = await file_driver.on_sale()
        [ticket] = await file_driver.sell(event_id, "fan-1")
        with pytest.raises(CheckInError) as exc:
            async with file_db.get_session() as stale:
                seen = await services.tickets.get_ticket(stale, ticket.id)
                assert seen.status == "unused"
                async with file_db.get_session() as session:
                    await services.tickets.check_in(session, ticket.id, ORGANIZER)
                await services.tickets.check_in(stale, ticket.id, ADMIN)
        assert exc.value.code == "TICKET_ALREADY_USED"
        async with file_db.get_session() as session:
            assert len(await services.tickets.list_checkins(session, event_id)) == 1
