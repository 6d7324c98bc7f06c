"""
SolanaLedgerReader tests with a mocked solana-py AsyncClient.

Covers parsing of raw JSON-RPC shapes (jsonParsed and json encodings) and
wrapping of client errors into SignalFetchFailure.
"""

from __future__ import annotations

import asyncio
import base64
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.pubkey import Pubkey

from backend_bytescore.core.exceptions import SignalFetchFailure
from backend_bytescore.ledger.reader import (
    TOKEN_2022_PROGRAM_ID_STR,
    TOKEN_PROGRAM_ID_STR,
    SolanaLedgerReader,
)
from conftest import NOW, VALID_KEYPAIR, VALID_WALLET

VALID_SIG = str(VALID_KEYPAIR.sign_message(b"first"))
VALID_SIG_2 = str(VALID_KEYPAIR.sign_message(b"second"))
SYSTEM = "11111111111111111111111111111111"
OTHER = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
PROGRAM_ID = "9Dv2v4Lhcndjv5Mtq3A3m5xZi5JwQkUg3qh9MKT5nqpP"


def _reader(client: AsyncMock) -> SolanaLedgerReader:
    return SolanaLedgerReader("http://localhost:8899", client=client)


def test_get_signatures_parses_items():
    client = AsyncMock()
    client.get_signatures_for_address.return_value = MagicMock(value=[
        {"signature": VALID_SIG, "slot": 12, "blockTime": NOW, "err": None},
        {"signature": VALID_SIG_2, "slot": 10, "blockTime": NOW - 50, "err": {"InstructionError": [0, "Custom"]}},
    ])

    sigs = asyncio.run(_reader(client).get_signatures(VALID_WALLET, limit=20, before=VALID_SIG))

    assert [s.signature for s in sigs] == [VALID_SIG, VALID_SIG_2]
    assert sigs[0].block_time == NOW and not sigs[0].failed
    assert sigs[1].failed
    kwargs = client.get_signatures_for_address.call_args.kwargs
    assert kwargs["limit"] == 20
    assert str(kwargs["before"]) == VALID_SIG


def test_get_signatures_empty_value():
    client = AsyncMock()
    client.get_signatures_for_address.return_value = MagicMock(value=None)
    assert asyncio.run(_reader(client).get_signatures(VALID_WALLET, limit=5)) == []


def test_get_transaction_json_parsed():
    """Program ids come from outer and inner instructions; balances line up with keys."""
    client = AsyncMock()
    client.get_transaction.return_value = MagicMock(value={
        "blockTime": NOW,
        "meta": {
            "err": None,
            "preBalances": [3_000_000_000, 1],
            "postBalances": [1_000_000_000, 1],
            "innerInstructions": [
                {"index": 0, "instructions": [{"programId": TOKEN_PROGRAM_ID_STR, "parsed": {}}]},
            ],
        },
        "transaction": {
            "message": {
                "accountKeys": [{"pubkey": VALID_WALLET, "signer": True}, {"pubkey": SYSTEM, "signer": False}],
                "instructions": [{"programId": SYSTEM, "parsed": {"type": "transfer"}}],
            },
        },
    })

    tx = asyncio.run(_reader(client).get_transaction(VALID_SIG))

    assert tx.signature == VALID_SIG
    assert tx.block_time == NOW
    assert not tx.failed
    assert tx.program_ids == {SYSTEM, TOKEN_PROGRAM_ID_STR}
    assert tx.balance_change_sol(VALID_WALLET) == pytest.approx(2.0)
    assert tx.balance_change_sol(OTHER) == 0.0
    assert client.get_transaction.call_args.kwargs["encoding"] == "jsonParsed"
    assert client.get_transaction.call_args.kwargs["max_supported_transaction_version"] == 0


def test_get_transaction_program_id_index():
    """Unparsed instructions resolve programIdIndex against accountKeys."""
    client = AsyncMock()
    client.get_transaction.return_value = MagicMock(value={
        "blockTime": NOW,
        "meta": {"err": {"InstructionError": [0, "Custom"]}, "preBalances": [5, 0, 1], "postBalances": [4, 0, 1]},
        "transaction": {
            "message": {
                "accountKeys": [VALID_WALLET, OTHER, PROGRAM_ID],
                "instructions": [{"programIdIndex": 2, "accounts": [0, 1], "data": ""}],
            },
        },
    })

    tx = asyncio.run(_reader(client).get_transaction(VALID_SIG))

    assert tx.failed
    assert tx.program_ids == {PROGRAM_ID}
    assert tx.account_keys == (VALID_WALLET, OTHER, PROGRAM_ID)


def test_get_transaction_missing_value():
    client = AsyncMock()
    client.get_transaction.return_value = MagicMock(value=None)
    assert asyncio.run(_reader(client).get_transaction(VALID_SIG)) is None


def test_client_error_becomes_signal_fetch_failure():
    client = AsyncMock()
    client.get_signatures_for_address.side_effect = RuntimeError("429 Too Many Requests")
    with pytest.raises(SignalFetchFailure) as exc_info:
        asyncio.run(_reader(client).get_signatures(VALID_WALLET, limit=5))
    assert exc_info.value.method == "get_signatures_for_address"
    assert "429" in exc_info.value.detail


def test_malformed_identifiers_raise_signal_fetch_failure():
    client = AsyncMock()
    with pytest.raises(SignalFetchFailure):
        asyncio.run(_reader(client).get_transaction("not-a-signature"))
    with pytest.raises(SignalFetchFailure):
        asyncio.run(_reader(client).get_signatures("not-a-wallet", limit=5))


def test_get_token_mints_reads_both_token_programs():
    def _acct(mint: str) -> dict:
        return {"pubkey": OTHER, "account": {"data": {"program": "spl-token", "parsed": {"info": {"mint": mint}}}}}

    client = AsyncMock()
    client.get_token_accounts_by_owner_json_parsed.side_effect = [
        MagicMock(value=[_acct("MintA"), _acct("MintB")]),
        MagicMock(value=[_acct("MintC"), {"pubkey": OTHER, "account": {"data": ["", "base64"]}}]),
    ]

    mints = asyncio.run(_reader(client).get_token_mints(VALID_WALLET))

    assert mints == ["MintA", "MintB", "MintC"]
    calls = client.get_token_accounts_by_owner_json_parsed.call_args_list
    assert [c.args[1].program_id for c in calls] == [
        Pubkey.from_string(TOKEN_PROGRAM_ID_STR),
        Pubkey.from_string(TOKEN_2022_PROGRAM_ID_STR),
    ]


def test_get_program_accounts_memcmp_and_decode():
    payload = b"\x01\x02\x03bond-data"
    client = AsyncMock()
    client.get_program_accounts.return_value = MagicMock(value=[
        {"pubkey": OTHER, "account": {"data": [base64.b64encode(payload).decode(), "base64"]}},
    ])

    accounts = asyncio.run(_reader(client).get_program_accounts(PROGRAM_ID, 8, VALID_WALLET))

    assert len(accounts) == 1
    assert accounts[0].pubkey == OTHER
    assert accounts[0].data == payload
    kwargs = client.get_program_accounts.call_args.kwargs
    assert kwargs["encoding"] == "base64"
    assert kwargs["filters"][0].offset == 8
    assert kwargs["filters"][0].bytes == VALID_WALLET


def test_context_manager_closes_client():
    client = AsyncMock()

    async def run():
        async with _reader(client):
            pass

    asyncio.run(run())
    client.close.assert_awaited_once()


def test_context_manager_swallows_close_failure():
    """A failing close is logged; the block's return value still comes through."""
    client = AsyncMock()
    client.close.side_effect = RuntimeError("session already closed")

    async def run():
        async with _reader(client):
            return "scored"

    assert asyncio.run(run()) == "scored"
    client.close.assert_awaited_once()
