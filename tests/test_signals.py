"""
Signal fetcher tests against an in-memory ledger reader.

Each fetcher returns its safe default on failure; none raises.
"""

from __future__ import annotations

import asyncio

import pytest

from backend_bytescore.analytics.signals import (
    RedFlagInputs,
    TransactionActivity,
    fetch_contract_usage,
    fetch_red_flag_inputs,
    fetch_token_diversity,
    fetch_transaction_activity,
    fetch_wallet_age,
)
from backend_bytescore.config.settings import SYSTEM_PROGRAM_ID, FetchConfig, ScoringConfig
from backend_bytescore.ledger.models import SignatureInfo, TransactionDetails
from conftest import DAY, NOW, VALID_WALLET, make_signatures

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
MEMO_PROGRAM = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"
OTHER = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"


def _tx(signature: str, delta_lamports: int, programs: tuple[str, ...] = (SYSTEM_PROGRAM_ID,)) -> TransactionDetails:
    return TransactionDetails(
        signature=signature,
        block_time=NOW,
        failed=False,
        account_keys=(OTHER, VALID_WALLET, SYSTEM_PROGRAM_ID),
        pre_balances=(5_000_000_000, 10_000_000_000, 1),
        post_balances=(5_000_000_000, 10_000_000_000 - delta_lamports, 1),
        program_ids=frozenset(programs),
    )


def test_wallet_age_pages_back_to_oldest(make_reader):
    """Age comes from the oldest signature across all pages, not the first page."""
    times = [NOW - d * DAY for d in (1, 5, 20, 60, 100)]
    reader = make_reader(signatures=make_signatures(times))
    fetch = FetchConfig(wallet_age_page_size=2)

    age = asyncio.run(fetch_wallet_age(reader, VALID_WALLET, fetch, now=NOW))

    assert age == 100
    befores = [call[3] for call in reader.calls if call[0] == "get_signatures"]
    assert befores == [None, "sig1", "sig3"]


def test_wallet_age_stops_at_page_limit(make_reader):
    times = [NOW - d * DAY for d in (1, 5, 20, 60, 100)]
    reader = make_reader(signatures=make_signatures(times))
    fetch = FetchConfig(wallet_age_page_size=2, wallet_age_max_pages=1)

    assert asyncio.run(fetch_wallet_age(reader, VALID_WALLET, fetch, now=NOW)) == 5


def test_wallet_age_zero_without_history(make_reader):
    assert asyncio.run(fetch_wallet_age(make_reader(), VALID_WALLET, FetchConfig(), now=NOW)) == 0
    no_times = make_reader(signatures=make_signatures([None, None]))
    assert asyncio.run(fetch_wallet_age(no_times, VALID_WALLET, FetchConfig(), now=NOW)) == 0


def test_wallet_age_zero_on_failure(make_reader):
    reader = make_reader(signatures=make_signatures([NOW]), fail=("get_signatures",))
    assert asyncio.run(fetch_wallet_age(reader, VALID_WALLET, FetchConfig(), now=NOW)) == 0


def test_transaction_activity_counts_and_samples_volume(make_reader):
    """Count covers the whole window; volume sums |pre - post| over the sample only."""
    sigs = make_signatures([NOW] * 4)
    txs = {
        "sig0": _tx("sig0", 1_500_000_000),
        "sig1": _tx("sig1", -500_000_000),
        "sig2": _tx("sig2", 2_000_000_000),
        "sig3": _tx("sig3", 9_000_000_000),
    }
    reader = make_reader(signatures=sigs, transactions=txs)
    fetch = FetchConfig(volume_sample_size=3)

    activity = asyncio.run(fetch_transaction_activity(reader, VALID_WALLET, fetch))

    assert activity.count == 4
    assert activity.volume_sol == pytest.approx(4.0)
    fetched = {call[1] for call in reader.calls if call[0] == "get_transaction"}
    assert fetched == {"sig0", "sig1", "sig2"}


def test_transaction_activity_skips_missing_transactions(make_reader):
    sigs = make_signatures([NOW] * 2)
    reader = make_reader(signatures=sigs, transactions={"sig1": _tx("sig1", 250_000_000)})
    activity = asyncio.run(fetch_transaction_activity(reader, VALID_WALLET, FetchConfig()))
    assert activity == TransactionActivity(count=2, volume_sol=pytest.approx(0.25))


def test_transaction_activity_keeps_count_when_tx_fetch_fails(make_reader):
    reader = make_reader(signatures=make_signatures([NOW] * 3), fail=("get_transaction",))
    activity = asyncio.run(fetch_transaction_activity(reader, VALID_WALLET, FetchConfig()))
    assert activity.count == 3
    assert activity.volume_sol == 0.0


def test_transaction_activity_default_on_failure(make_reader):
    reader = make_reader(fail=("get_signatures",))
    activity = asyncio.run(fetch_transaction_activity(reader, VALID_WALLET, FetchConfig()))
    assert activity == TransactionActivity()


def test_token_diversity_counts_distinct_mints(make_reader):
    reader = make_reader(mints=["MintA", "MintB", "MintA", "MintC"])
    assert asyncio.run(fetch_token_diversity(reader, VALID_WALLET)) == 3


def test_token_diversity_zero_on_failure(make_reader):
    reader = make_reader(mints=["MintA"], fail=("get_token_mints",))
    assert asyncio.run(fetch_token_diversity(reader, VALID_WALLET)) == 0


def test_contract_usage_excludes_system_program(make_reader):
    sigs = make_signatures([NOW] * 3)
    txs = {
        "sig0": _tx("sig0", 0, (SYSTEM_PROGRAM_ID, TOKEN_PROGRAM)),
        "sig1": _tx("sig1", 0, (TOKEN_PROGRAM, MEMO_PROGRAM)),
        "sig2": _tx("sig2", 0, (SYSTEM_PROGRAM_ID,)),
    }
    reader = make_reader(signatures=sigs, transactions=txs)
    assert asyncio.run(fetch_contract_usage(reader, VALID_WALLET, FetchConfig())) == 2


def test_contract_usage_zero_on_failure(make_reader):
    reader = make_reader(fail=("get_signatures",))
    assert asyncio.run(fetch_contract_usage(reader, VALID_WALLET, FetchConfig())) == 0


def test_red_flag_inputs(make_reader):
    """Failed ratio over the window; inactivity from the newest signature."""
    times = [NOW - 45 * DAY, NOW - 50 * DAY, NOW - 60 * DAY, NOW - 70 * DAY]
    reader = make_reader(signatures=make_signatures(times, failed={1, 3}))
    flags = asyncio.run(fetch_red_flag_inputs(reader, VALID_WALLET, FetchConfig(), ScoringConfig(), now=NOW))
    assert flags == RedFlagInputs(failed_tx_ratio=0.5, inactive_days=45)


def test_red_flag_inputs_default_for_empty_history(make_reader):
    flags = asyncio.run(fetch_red_flag_inputs(make_reader(), VALID_WALLET, FetchConfig(), ScoringConfig(), now=NOW))
    assert flags == RedFlagInputs(0.0, 182)


def test_red_flag_inputs_default_on_failure(make_reader):
    reader = make_reader(signatures=make_signatures([NOW]), fail=("get_signatures",))
    flags = asyncio.run(fetch_red_flag_inputs(reader, VALID_WALLET, FetchConfig(), ScoringConfig(), now=NOW))
    assert flags == RedFlagInputs(0.0, 182)


def test_red_flag_inputs_default_on_malformed_signature(make_reader):
    """A bad record from the reader is handled inside the fetcher, not left to the caller."""
    reader = make_reader(signatures=[SignatureInfo(signature="sig0", slot=1, err=None, block_time="yesterday")])
    flags = asyncio.run(fetch_red_flag_inputs(reader, VALID_WALLET, FetchConfig(), ScoringConfig(), now=NOW))
    assert flags == RedFlagInputs(0.0, 182)
