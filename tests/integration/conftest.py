"""API-level helpers for walking events through the HTTP lifecycle."""

from datetime import datetime, timedelta, timezone

import pytest

ADMIN = {"X-Mythra-Actor-Id": "admin-1", "X-Mythra-Role": "admin", "X-Mythra-Api-Key": "test-admin-api-key"}
ORGANIZER = {"X-Mythra-Actor-Id": "org-1", "X-Mythra-Role": "organizer"}


def investor(investor_id: str) -> dict[str, str]:
    return {"X-Mythra-Actor-Id": investor_id, "X-Mythra-Role": "investor"}


class Api:
    def __init__(self, client):
        self.client = client

    async def create_event(self, days_from_now: float = 10, **overrides) -> dict:
        start = datetime.now(timezone.utc) + timedelta(days=days_from_now)
        body = {
            "name": "Launch Night",
            "venue": "Warehouse 9",
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=6)).isoformat(),
            "price_sol": "0.5",
            "max_tickets": 10,
            "vault_cap": "100",
            "creator_wallet": "wallet-org",
        }
        body.update(overrides)
        resp = await self.client.post("/events", json=body, headers=ORGANIZER)
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def transition(self, event_id: str, target: str, headers=ORGANIZER, **extra):
        return await self.client.post(
            f"/events/{event_id}/transition", json={"target": target, **extra}, headers=headers,
        )

    async def move(self, event_id: str, target: str, headers=ORGANIZER, **extra) -> dict:
        resp = await self.transition(event_id, target, headers=headers, **extra)
        assert resp.status_code == 200, resp.text
        return resp.json()

    async def open_investment(self, event_id: str) -> None:
        await self.move(event_id, "pending_approval")
        await self.move(event_id, "investment_window", headers=ADMIN)

    async def add_question(self, event_id: str, text: str = "Pick a headliner", options=("A", "B")) -> dict:
        resp = await self.client.post(
            f"/events/{event_id}/questions",
            json={"question_text": text, "options": list(options)},
            headers=ORGANIZER,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def invest(self, event_id: str, investor_id: str, amount: str):
        return await self.client.post(
            f"/events/{event_id}/investments",
            json={"amount_sol": amount, "investor_wallet": f"wallet-{investor_id}"},
            headers=investor(investor_id),
        )

    async def on_sale(self, **overrides) -> dict:
        event = await self.create_event(**overrides)
        await self.open_investment(event["id"])
        await self.move(event["id"], "selling_tickets")
        return event

    async def buy(self, event_id: str, buyer_id: str, quantity: int = 1) -> list[dict]:
        resp = await self.client.post(
            f"/events/{event_id}/tickets",
            json={"quantity": quantity, "buyer_wallet": f"wallet-{buyer_id}"},
            headers=investor(buyer_id),
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["tickets"]

    async def to_calculating_income(self, investments: dict[str, str]) -> str:
        event = await self.create_event(days_from_now=-2)
        await self.open_investment(event["id"])
        for investor_id, amount in investments.items():
            resp = await self.invest(event["id"], investor_id, amount)
            assert resp.status_code == 201, resp.text
        for target in ("selling_tickets", "waiting_for_event", "event_running", "calculating_income"):
            await self.move(event["id"], target)
        return event["id"]


@pytest.fixture
def api(client):
    return Api(client)
