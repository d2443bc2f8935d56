"""Integration tests for ticket and check-in endpoints."""


class TestTicketRouter:
    async def test_purchase_issues_tickets(self, client, api):
        event = await api.on_sale()
        tickets = await api.buy(event["id"], "fan-1", 2)
        assert len(tickets) == 2
        assert {t["buyer_wallet"] for t in tickets} == {"wallet-fan-1"}
        assert all(t["mint_address"].startswith("MINT_") for t in tickets)
        resp = await client.get(f"/events/{event['id']}/tickets")
        assert {t["id"] for t in resp.json()} == {t["id"] for t in tickets}
        resp = await client.get("/buyers/fan-1/tickets")
        assert len(resp.json()) == 2

    async def test_get_by_mint(self, client, api):
        event = await api.on_sale()
        [ticket] = await api.buy(event["id"], "fan-1")
        resp = await client.get(f"/tickets/{ticket['mint_address']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == ticket["id"]
        resp = await client.get("/tickets/MINT_missing")
        assert resp.status_code == 404

    async def test_unknown_event(self, client):
        resp = await client.get("/events/nope/tickets")
        assert resp.status_code == 404


class TestCheckInRouter:
    async def test_check_in_once(self, client, api, organizer_headers):
        event = await api.on_sale()
        [ticket] = await api.buy(event["id"], "fan-1")
        body = {"ticket": ticket["mint_address"], "event_id": event["id"], "location": "Gate A"}
        resp = await client.post("/checkins", json=body, headers=organizer_headers)
        assert resp.status_code == 201
        assert resp.json()["ticket_id"] == ticket["id"]

        resp = await client.post("/checkins", json=body, headers=organizer_headers)
        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "TICKET_ALREADY_USED"

        resp = await client.get(f"/tickets/{ticket['id']}")
        assert resp.json()["status"] == "used"
        resp = await client.get(f"/events/{event['id']}/checkins")
        assert len(resp.json()) == 1

    async def test_wrong_event(self, client, api, organizer_headers):
        event = await api.on_sale()
        other = await api.on_sale()
        [ticket] = await api.buy(event["id"], "fan-1")
        resp = await client.post(
            "/checkins", json={"ticket": ticket["id"], "event_id": other["id"]},
            headers=organizer_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "TICKET_WRONG_EVENT"

    async def test_investor_cannot_check_in(self, client, api, investor_headers):
        event = await api.on_sale()
        [ticket] = await api.buy(event["id"], "fan-1")
        resp = await client.post(
            "/checkins", json={"ticket": ticket["id"]}, headers=investor_headers("fan-1"),
        )
        assert resp.status_code == 403

    async def test_unknown_ticket(self, client, organizer_headers):
        resp = await client.post("/checkins", json={"ticket": "MINT_missing"}, headers=organizer_headers)
        assert resp.status_code == 404
