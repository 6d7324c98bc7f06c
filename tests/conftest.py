"""
Pytest fixtures for ByteScore tests: an in-memory ledger reader and test wallets.

FakeLedgerReader serves canned signatures, transactions, token mints and
program accounts; methods listed in fail= raise SignalFetchFailure and
methods listed in slow= sleep until cancelled.
"""

from __future__ import annotations

import asyncio

import pytest
from solders.keypair import Keypair

from backend_bytescore.core.exceptions import SignalFetchFailure
from backend_bytescore.ledger.models import ProgramAccount, SignatureInfo, TransactionDetails

# On-curve wallets (ed25519 keys from fixed seeds)
VALID_KEYPAIR = Keypair.from_seed(bytes([7] * 32))
VALID_WALLET = str(VALID_KEYPAIR.pubkey())
VALID_WALLET_2 = str(Keypair.from_seed(bytes([9] * 32)).pubkey())

NOW = 1_700_000_000
DAY = 86400


class FakeLedgerReader:
    def __init__(
        self,
        signatures: list[SignatureInfo] | None = None,
        transactions: dict[str, TransactionDetails] | None = None,
        mints: list[str] | None = None,
        program_accounts: dict[str, list[ProgramAccount]] | None = None,
        fail: tuple[str, ...] = (),
        slow: tuple[str, ...] = (),
    ) -> None:
        self.signatures = signatures or []  # newest first
        self.transactions = transactions or {}
        self.mints = mints or []
        self.program_accounts = program_accounts or {}
        self.fail = set(fail)
        self.slow = set(slow)
        self.calls: list[tuple] = []
        self.cancelled: list[str] = []

    async def _enter(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        if method in self.fail:
            raise SignalFetchFailure(method, "rpc unavailable")
        if method in self.slow:
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                self.cancelled.append(method)
                raise

    async def get_signatures(self, address, limit, before=None):
        await self._enter("get_signatures", address, limit, before)
        sigs = self.signatures
        if before is not None:
            idx = next(i for i, s in enumerate(sigs) if s.signature == before)
            sigs = sigs[idx + 1:]
        return list(sigs[:limit])

    async def get_transaction(self, signature):
        await self._enter("get_transaction", signature)
        return self.transactions.get(signature)

    async def get_token_mints(self, owner):
        await self._enter("get_token_mints", owner)
        return list(self.mints)

    async def get_program_accounts(self, program_id, offset, match):
        await self._enter("get_program_accounts", program_id, offset, match)
        return list(self.program_accounts.get(match, []))


def make_signatures(block_times: list[int | None], failed: set[int] = frozenset()) -> list[SignatureInfo]:
    """SignatureInfo list sig0..sigN (newest first); indexes in failed carry an err."""
    return [
        SignatureInfo(
            signature=f"sig{i}",
            slot=1000 - i,
            err={"InstructionError": [0, "Custom"]} if i in failed else None,
            block_time=bt,
        )
        for i, bt in enumerate(block_times)
    ]


@pytest.fixture
def make_reader():
    """Factory for FakeLedgerReader."""
    return FakeLedgerReader
