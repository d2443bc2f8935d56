"""Ledger collaborator: the only component that moves value.

The lifecycle and payout calculator only compute amounts. Callers hand the
computed records to a ``LedgerClient`` to create on-chain event accounts,
transfer payouts and verify wallet signatures.
"""

import hashlib
import hmac
import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx

from mythra_engine.common.exceptions import LedgerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerReceipt:
    signature: str
    detail: dict[str, Any] = field(default_factory=dict)


class LedgerClient(ABC):
    """Capability interface for the settlement ledger."""

    @abstractmethod
    async def create_event(
        self, event_id: str, organizer_wallet: str, max_tickets: int,
    ) -> LedgerReceipt:
        ...

    @abstractmethod
    async def transfer_payout(
        self, recipient: str, amount_sol: Decimal, memo: str = "",
    ) -> LedgerReceipt:
        ...

    @abstractmethod
    async def verify_signature(self, wallet: str, message: str, signature: str) -> bool:
        ...


class SimulatedLedger(LedgerClient):
    """In-process ledger for development and tests.

    Signatures are deterministic digests so runs are reproducible. Transfers
    to wallets listed in ``failing_recipients`` raise ``LedgerError``.
    """

    def __init__(self, failing_recipients: set[str] | None = None):
        self.failing_recipients = set(failing_recipients or ())
        self.transfers: list[dict[str, Any]] = []
        self.events: dict[str, dict[str, Any]] = {}
        self._seq = itertools.count(1)

    def _signature(self, kind: str, payload: str) -> str:
        digest = hashlib.sha256(f"{kind}:{next(self._seq)}:{payload}".encode()).hexdigest()
        return f"sim_{kind}_{digest[:32]}"

    @staticmethod
    def sign(wallet: str, message: str) -> str:
        """Produce the signature ``verify_signature`` accepts for a wallet."""
        return hmac.new(wallet.encode(), message.encode(), hashlib.sha256).hexdigest()

    async def create_event(self, event_id, organizer_wallet, max_tickets):
        sig = self._signature("event", f"{event_id}:{organizer_wallet}:{max_tickets}")
        self.events[event_id] = {
            "organizer_wallet": organizer_wallet,
            "max_tickets": max_tickets,
            "signature": sig,
        }
        logger.info("Simulated ledger created event %s", event_id)
        return LedgerReceipt(signature=sig, detail={"event_id": event_id})

    async def transfer_payout(self, recipient, amount_sol, memo=""):
        if recipient in self.failing_recipients:
            raise LedgerError(f"Transfer to {recipient} rejected by simulated ledger")
        sig = self._signature("transfer", f"{recipient}:{amount_sol}:{memo}")
        self.transfers.append({
            "recipient": recipient,
            "amount_sol": amount_sol,
            "memo": memo,
            "signature": sig,
        })
        logger.info("Simulated ledger transferred %s SOL to %s", amount_sol, recipient)
        return LedgerReceipt(signature=sig, detail={"recipient": recipient})

    async def verify_signature(self, wallet, message, signature):
        return hmac.compare_digest(self.sign(wallet, message), signature)


class HttpLedgerClient(LedgerClient):
    """Calls a ledger gateway over HTTP."""

    def __init__(self, base_url: str, token: str = "", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {"X-Ledger-Token": self.token} if self.token else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(f"{self.base_url}{path}", json=payload, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Ledger call %s failed: %s", path, exc)
            raise LedgerError(f"Ledger call {path} failed: {exc}") from exc
        except ValueError as exc:
            logger.warning("Ledger call %s returned invalid JSON", path)
            raise LedgerError(f"Ledger call {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise LedgerError(f"Ledger call {path} returned unexpected payload")
        return data

    def _receipt(self, path: str, data: dict[str, Any]) -> LedgerReceipt:
        signature = data.get("signature")
        if not isinstance(signature, str) or not signature:
            logger.warning("Ledger call %s returned no signature", path)
            raise LedgerError(f"Ledger call {path} returned no signature")
        return LedgerReceipt(signature=signature, detail=data)

    async def create_event(self, event_id, organizer_wallet, max_tickets):
        data = await self._post("/v1/events", {
            "event_id": event_id,
            "organizer_wallet": organizer_wallet,
            "max_tickets": max_tickets,
        })
        return self._receipt("/v1/events", data)

    async def transfer_payout(self, recipient, amount_sol, memo=""):
        data = await self._post("/v1/transfers", {
            "recipient": recipient,
            "amount_sol": str(amount_sol),
            "memo": memo,
        })
        return self._receipt("/v1/transfers", data)

    async def verify_signature(self, wallet, message, signature):
        data = await self._post("/v1/signatures/verify", {
            "wallet": wallet,
            "message": message,
            "signature": signature,
        })
        return bool(data.get("valid", False))
