"""Tests for ledger clients: simulated and HTTP gateway."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from mythra_engine.common.exceptions import LedgerError
from mythra_engine.ledger.client import HttpLedgerClient, SimulatedLedger


def _mock_response(data: dict) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = data
    resp.raise_for_status.return_value = None
    return resp


class TestSimulatedLedger:
    async def test_create_event(self):
        ledger = SimulatedLedger()
        receipt = await ledger.create_event("evt-1", "wallet-1", 100)
        assert receipt.signature.startswith("sim_event_")
        assert ledger.events["evt-1"]["max_tickets"] == 100

    async def test_transfer_recorded(self):
        ledger = SimulatedLedger()
        receipt = await ledger.transfer_payout("wallet-a", Decimal("8.4"), memo="roi")
        assert receipt.signature.startswith("sim_transfer_")
        assert ledger.transfers == [{
            "recipient": "wallet-a",
            "amount_sol": Decimal("8.4"),
            "memo": "roi",
            "signature": receipt.signature,
        }]

    async def test_signatures_unique_per_call(self):
        ledger = SimulatedLedger()
        a = await ledger.transfer_payout("w", Decimal("1"))
        b = await ledger.transfer_payout("w", Decimal("1"))
        assert a.signature != b.signature

    async def test_failing_recipient(self):
        ledger = SimulatedLedger(failing_recipients={"bad-wallet"})
        with pytest.raises(LedgerError):
            await ledger.transfer_payout("bad-wallet", Decimal("1"))
        assert ledger.transfers == []

    async def test_verify_signature(self):
        ledger = SimulatedLedger()
        sig = SimulatedLedger.sign("wallet-1", "hello")
        assert await ledger.verify_signature("wallet-1", "hello", sig)
        assert not await ledger.verify_signature("wallet-2", "hello", sig)


class TestHttpLedgerClient:
    async def test_transfer_posts_payload(self):
        client = HttpLedgerClient("https://ledger.example.com/", token="tok")
        with patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock,
            return_value=_mock_response({"signature": "sig-1"}),
        ) as post:
            receipt = await client.transfer_payout("wallet-a", Decimal("8.4"), memo="roi")
        assert receipt.signature == "sig-1"
        args, kwargs = post.call_args
        assert args[0] == "https://ledger.example.com/v1/transfers"
        assert kwargs["json"] == {"recipient": "wallet-a", "amount_sol": "8.4", "memo": "roi"}
        assert kwargs["headers"] == {"X-Ledger-Token": "tok"}

    async def test_create_event(self):
        client = HttpLedgerClient("https://ledger.example.com")
        with patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock,
            return_value=_mock_response({"signature": "sig-evt"}),
        ) as post:
            receipt = await client.create_event("evt-1", "wallet-1", 50)
        assert receipt.signature == "sig-evt"
        assert post.call_args.kwargs["headers"] == {}

    async def test_verify_signature(self):
        client = HttpLedgerClient("https://ledger.example.com")
        with patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock,
            return_value=_mock_response({"valid": True}),
        ):
            assert await client.verify_signature("w", "m", "s")

    async def test_http_error_becomes_ledger_error(self):
        client = HttpLedgerClient("https://ledger.example.com")
        with patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock,
            side_effect=httpx.ConnectError("refused"),
        ):
            with pytest.raises(LedgerError, match="/v1/transfers"):
                await client.transfer_payout("w", Decimal("1"))

    async def test_invalid_json_becomes_ledger_error(self):
        client = HttpLedgerClient("https://ledger.example.com")
        resp = MagicMock()
        resp.raise_for_status.return_value = None
        resp.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock, return_value=resp):
            with pytest.raises(LedgerError, match="invalid JSON"):
                await client.transfer_payout("w", Decimal("1"))

    @pytest.mark.parametrize("data", [{}, {"signature": ""}, {"signature": None}])
    async def test_missing_signature_becomes_ledger_error(self, data):
        client = HttpLedgerClient("https://ledger.example.com")
        with patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock, return_value=_mock_response(data),
        ):
            with pytest.raises(LedgerError, match="no signature"):
                await client.transfer_payout("w", Decimal("1"))

    async def test_non_object_payload(self):
        client = HttpLedgerClient("https://ledger.example.com")
        with patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock, return_value=_mock_response(["sig"]),
        ):
            with pytest.raises(LedgerError, match="unexpected payload"):
                await client.create_event("evt-1", "w", 1)
