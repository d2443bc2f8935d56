"""Integration tests for investment endpoints."""

from decimal import Decimal


class TestInvestmentRouter:
    async def test_invest(self, client, api):
        event = await api.create_event()
        await api.open_investment(event["id"])
        resp = await api.invest(event["id"], "inv-1", "12.5")
        assert resp.status_code == 201
        assert Decimal(resp.json()["amount_sol"]) == Decimal("12.5")
        resp = await client.get(f"/events/{event['id']}")
        assert Decimal(resp.json()["current_investment"]) == Decimal("12.5")

    async def test_only_investors_invest(self, client, api, organizer_headers):
        event = await api.create_event()
        await api.open_investment(event["id"])
        resp = await client.post(
            f"/events/{event['id']}/investments", json={"amount_sol": "1"}, headers=organizer_headers,
        )
        assert resp.status_code == 403

    async def test_window_closed(self, api):
        event = await api.create_event()
        resp = await api.invest(event["id"], "inv-1", "1")
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "EVENT_NOT_INVESTABLE"

    async def test_duplicate(self, api):
        event = await api.create_event()
        await api.open_investment(event["id"])
        await api.invest(event["id"], "inv-1", "1")
        resp = await api.invest(event["id"], "inv-1", "1")
        assert resp.json()["detail"]["code"] == "DUPLICATE_INVESTMENT"

    async def test_vault_cap(self, api):
        event = await api.create_event(vault_cap="5")
        await api.open_investment(event["id"])
        resp = await api.invest(event["id"], "inv-1", "6")
        assert resp.json()["detail"]["code"] == "VAULT_CAP_EXCEEDED"

    async def test_non_positive_rejected_by_schema(self, api):
        event = await api.create_event()
        await api.open_investment(event["id"])
        resp = await api.invest(event["id"], "inv-1", "0")
        assert resp.status_code == 422

    async def test_list(self, client, api):
        event = await api.create_event()
        await api.open_investment(event["id"])
        await api.invest(event["id"], "inv-1", "1")
        await api.invest(event["id"], "inv-2", "2")
        resp = await client.get(f"/events/{event['id']}/investments")
        assert {i["investor_id"] for i in resp.json()} == {"inv-1", "inv-2"}
        resp = await client.get("/investors/inv-2/investments")
        assert [i["event_id"] for i in resp.json()] == [event["id"]]

    async def test_list_missing_event(self, client):
        resp = await client.get("/events/nope/investments")
        assert resp.status_code == 404


class TestRecalculateInvestment:
    async def test_recalculate(self, client, api, api_key):
        event = await api.create_event()
        await api.open_investment(event["id"])
        await api.invest(event["id"], "inv-1", "1.5")
        await api.invest(event["id"], "inv-2", "2")
        resp = await client.post(
            f"/events/{event['id']}/recalculate-investment", headers={"X-Mythra-Api-Key": api_key},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert Decimal(data["old_amount"]) == Decimal("3.5")
        assert Decimal(data["new_amount"]) == Decimal("3.5")
        assert data["investment_count"] == 2

    async def test_requires_api_key(self, client, api):
        event = await api.create_event()
        resp = await client.post(
            f"/events/{event['id']}/recalculate-investment", headers={"X-Mythra-Api-Key": "wrong"},
        )
        assert resp.status_code == 403

    async def test_missing_event(self, client, api_key):
        resp = await client.post(
            "/events/nope/recalculate-investment", headers={"X-Mythra-Api-Key": api_key},
        )
        assert resp.status_code == 404
