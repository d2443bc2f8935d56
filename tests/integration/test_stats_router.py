"""Integration tests for stats endpoints."""

from decimal import Decimal


async def _event_with_sales(client, api, organizer_headers):
    event = await api.create_event(max_tickets=4)
    await api.open_investment(event["id"])
    await api.invest(event["id"], "inv-1", "10")
    await api.move(event["id"], "selling_tickets")
    tickets = await api.buy(event["id"], "fan-1", 2)
    resp = await client.post("/checkins", json={"ticket": tickets[0]["id"]}, headers=organizer_headers)
    assert resp.status_code == 201
    return event["id"]


class TestStatsRouter:
    async def test_event_stats(self, client, api, organizer_headers):
        event_id = await _event_with_sales(client, api, organizer_headers)
        resp = await client.get(f"/events/{event_id}/stats")
        assert resp.status_code == 200
        data = resp.json()
        assert data["tickets_sold"] == 2
        assert data["tickets_remaining"] == 2
        assert Decimal(data["ticket_revenue"]) == Decimal("1")
        assert data["checked_in"] == 1
        assert data["check_in_rate"] == 50.0
        assert Decimal(data["total_invested"]) == Decimal("10")

    async def test_event_stats_missing(self, client):
        resp = await client.get("/events/nope/stats")
        assert resp.status_code == 404

    async def test_organizer_stats(self, client, api, organizer_headers):
        await _event_with_sales(client, api, organizer_headers)
        await api.create_event()
        resp = await client.get("/organizers/org-1/stats")
        data = resp.json()
        assert data["total_events"] == 2
        assert data["events_by_status"] == {"selling_tickets": 1, "draft": 1}
        assert data["total_checkins"] == 1

    async def test_admin_stats_requires_key(self, client, api_key):
        resp = await client.get("/stats/admin", headers={"X-Mythra-Api-Key": "wrong"})
        assert resp.status_code == 403
        resp = await client.get("/stats/admin", headers={"X-Mythra-Api-Key": api_key})
        assert resp.status_code == 200
        assert resp.json()["total_events"] == 0

    async def test_admin_stats(self, client, api, organizer_headers, api_key):
        await _event_with_sales(client, api, organizer_headers)
        pending = await api.create_event()
        await api.move(pending["id"], "pending_approval")
        resp = await client.get("/stats/admin", headers={"X-Mythra-Api-Key": api_key})
        data = resp.json()
        assert data["pending_approvals"] == 1
        assert data["total_tickets_sold"] == 2
        assert data["total_investors"] == 1
