"""
Activity signal fetchers: one raw ByteScore signal per function.

Each fetcher queries the ledger reader for a single signal and returns a safe
default on any failure, logging the error; nothing escapes a fetcher. They
share no state and can run concurrently.

  wallet age          days since the oldest signature (paged backwards)
  transaction data    count of the last 100 signatures, SOL moved in the last 10
  token diversity     distinct mints across SPL Token / Token-2022 accounts
  contract usage      distinct non-system programs in recent transactions
  red-flag inputs     failed ratio of the last 20 signatures, days since newest
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from backend_bytescore.bytescore_logging import get_logger, short_wallet
from backend_bytescore.config.settings import FetchConfig, ScoringConfig
from backend_bytescore.ledger.models import TransactionDetails
from backend_bytescore.ledger.reader import LedgerReader

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class TransactionActivity:
    count: int = 0
    volume_sol: float = 0.0


@dataclass(frozen=True)
class RedFlagInputs:
    failed_tx_ratio: float = 0.0
    inactive_days: int = 0


def _days_since(block_time: int, now: float) -> int:
    return max(0, int(round((now - block_time) / SECONDS_PER_DAY)))


async def _fetch_transactions(
    reader: LedgerReader, signatures: list[str], wallet: str
) -> list[TransactionDetails]:
    """Fetch transactions concurrently; a failing transaction is skipped, not fatal."""

    async def _one(signature: str) -> TransactionDetails | None:
        try:
            return await reader.get_transaction(signature)
        except Exception as e:
            logger.debug("signal_tx_fetch_failed", wallet=short_wallet(wallet), signature=signature[:44], error=str(e))
            return None

    results = await asyncio.gather(*(_one(s) for s in signatures if s))
    return [tx for tx in results if tx is not None]


async def fetch_wallet_age(
    reader: LedgerReader,
    wallet: str,
    fetch: FetchConfig,
    now: float | None = None,
) -> int:
    """Days since the account's earliest signature; 0 when none found or on failure."""
    now = time.time() if now is None else now
    try:
        oldest: int | None = None
        before: str | None = None
        for _ in range(fetch.wallet_age_max_pages):
            page = await reader.get_signatures(wallet, limit=fetch.wallet_age_page_size, before=before)
            if not page:
                break
            times = [s.block_time for s in page if s.block_time is not None]
            if times:
                page_oldest = min(times)
                oldest = page_oldest if oldest is None else min(oldest, page_oldest)
            if len(page) < fetch.wallet_age_page_size:
                break
            before = page[-1].signature
        if oldest is None:
            return 0
        age = _days_since(oldest, now)
        logger.debug("wallet_age_computed", wallet=short_wallet(wallet), age_days=age)
        return age
    except Exception as e:
        logger.warning("signal_wallet_age_failed", wallet=short_wallet(wallet), error=str(e))
        return 0


async def fetch_transaction_activity(
    reader: LedgerReader,
    wallet: str,
    fetch: FetchConfig,
) -> TransactionActivity:
    """Recent transaction count and summed absolute SOL balance change over a sub-sample."""
    try:
        signatures = await reader.get_signatures(wallet, limit=fetch.tx_count_window)
        sample = [s.signature for s in signatures[: fetch.volume_sample_size]]
        txs = await _fetch_transactions(reader, sample, wallet)
        volume = sum(tx.balance_change_sol(wallet) for tx in txs)
        return TransactionActivity(count=len(signatures), volume_sol=volume)
    except Exception as e:
        logger.warning("signal_transaction_data_failed", wallet=short_wallet(wallet), error=str(e))
        return TransactionActivity()


async def fetch_token_diversity(reader: LedgerReader, wallet: str) -> int:
    """Distinct token mints held (or once held) by the account; 0 on failure."""
    try:
        mints = await reader.get_token_mints(wallet)
        return len(set(mints))
    except Exception as e:
        logger.warning("signal_token_diversity_failed", wallet=short_wallet(wallet), error=str(e))
        return 0


async def fetch_contract_usage(
    reader: LedgerReader,
    wallet: str,
    fetch: FetchConfig,
) -> int:
    """Distinct programs invoked in recent transactions, excluding the System Program."""
    try:
        signatures = await reader.get_signatures(wallet, limit=fetch.contract_signature_window)
        sample = [s.signature for s in signatures[: fetch.contract_tx_sample]]
        txs = await _fetch_transactions(reader, sample, wallet)
        programs: set[str] = set()
        for tx in txs:
            programs |= tx.program_ids
        programs.discard(fetch.system_program_id)
        logger.debug("unique_programs_detected", wallet=short_wallet(wallet), count=len(programs))
        return len(programs)
    except Exception as e:
        logger.warning("signal_contract_usage_failed", wallet=short_wallet(wallet), error=str(e))
        return 0


async def fetch_red_flag_inputs(
    reader: LedgerReader,
    wallet: str,
    fetch: FetchConfig,
    scoring: ScoringConfig,
    now: float | None = None,
) -> RedFlagInputs:
    """
    Failed-transaction ratio and days since last activity.

    An unreadable or empty history gets a moderate inactivity value rather
    than zero, so an inaccessible account is not silently rewarded.
    """
    now = time.time() if now is None else now
    try:
        signatures = await reader.get_signatures(wallet, limit=fetch.red_flag_window)
        if not signatures:
            return RedFlagInputs(0.0, scoring.default_inactive_days)
        failed = sum(1 for s in signatures if s.failed)
        ratio = failed / len(signatures)
        newest = signatures[0].block_time
        inactive = _days_since(newest, now) if newest is not None else scoring.default_inactive_days
        return RedFlagInputs(failed_tx_ratio=ratio, inactive_days=inactive)
    except Exception as e:
        logger.warning("signal_red_flags_failed", wallet=short_wallet(wallet), error=str(e))
        return RedFlagInputs(0.0, scoring.default_inactive_days)
