"""
ByteScore facade: validate, fan out signal fetches, compose, fall back.

Single entrypoint for the API, the CLI and any other caller. No error
crosses this boundary: invalid identifiers and internal defects yield the
neutral default result; each failed, timed-out or cancelled fetch degrades
only its own signal.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

from backend_bytescore.analytics.models import RawSignals, ScoreResult, default_score_result
from backend_bytescore.analytics.platform_history import (
    BondRepaymentHistory,
    PlatformHistoryProvider,
    RepaymentHistory,
)
from backend_bytescore.analytics.signals import (
    RedFlagInputs,
    TransactionActivity,
    fetch_contract_usage,
    fetch_red_flag_inputs,
    fetch_token_diversity,
    fetch_transaction_activity,
    fetch_wallet_age,
)
from backend_bytescore.analytics.trust_engine import compose_score
from backend_bytescore.bytescore_logging import get_logger, short_wallet
from backend_bytescore.config.settings import FetchConfig, ScoringConfig, Settings, get_settings
from backend_bytescore.core.exceptions import InvalidIdentifier
from backend_bytescore.ledger.reader import LedgerReader, SolanaLedgerReader
from backend_bytescore.utils.wallet_utils import require_valid_account_id

logger = get_logger(__name__)

SIGNAL_WALLET_AGE = "wallet_age"
SIGNAL_TRANSACTIONS = "transactions"
SIGNAL_DIVERSITY = "diversity"
SIGNAL_CONTRACTS = "contracts"
SIGNAL_RED_FLAGS = "red_flags"
SIGNAL_HISTORY = "history"


class ByteScoreEngine:
    """
    Computes ByteScores against one ledger reader.

    scoring and fetch are immutable configs; pass alternates (e.g. in tests)
    instead of touching module state. history defaults to the neutral ratio
    when no platform history provider is supplied.
    """

    def __init__(
        self,
        reader: LedgerReader,
        history: PlatformHistoryProvider | None = None,
        scoring: ScoringConfig | None = None,
        fetch: FetchConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._reader = reader
        self._history = history
        self._scoring = scoring or ScoringConfig()
        self._fetch = fetch or FetchConfig()
        self._clock = clock

    def _defaults(self) -> dict[str, Any]:
        return {
            SIGNAL_WALLET_AGE: 0,
            SIGNAL_TRANSACTIONS: TransactionActivity(),
            SIGNAL_DIVERSITY: 0,
            SIGNAL_CONTRACTS: 0,
            SIGNAL_RED_FLAGS: RedFlagInputs(0.0, self._scoring.default_inactive_days),
            SIGNAL_HISTORY: RepaymentHistory(ratio=self._scoring.neutral_repayment_ratio),
        }

    async def _neutral_history(self) -> RepaymentHistory:
        return RepaymentHistory(ratio=self._scoring.neutral_repayment_ratio)

    async def _guarded(self, name: str, fetch: Awaitable[Any], default: Any, wallet: str) -> Any:
        """Await one fetch under its own timeout and error boundary."""
        try:
            if self._fetch.fetch_timeout_sec is None:
                return await fetch
            return await asyncio.wait_for(fetch, timeout=self._fetch.fetch_timeout_sec)
        except asyncio.TimeoutError:
            logger.warning("bytescore_signal_timeout", wallet=short_wallet(wallet), signal=name,
                           timeout_sec=self._fetch.fetch_timeout_sec)
            return default
        except Exception as e:
            logger.warning("bytescore_signal_failed", wallet=short_wallet(wallet), signal=name, error=str(e))
            return default

    async def collect_signals(self, wallet: str) -> RawSignals:
        """
        Run every fetch concurrently and join them all.

        Fetches still running after total_timeout_sec are cancelled and replaced
        by their defaults. If the caller is cancelled, in-flight fetches are too.
        """
        now = self._clock()
        defaults = self._defaults()
        history = self._history.repayment_history(wallet) if self._history else self._neutral_history()
        fetches = {
            SIGNAL_WALLET_AGE: fetch_wallet_age(self._reader, wallet, self._fetch, now),
            SIGNAL_TRANSACTIONS: fetch_transaction_activity(self._reader, wallet, self._fetch),
            SIGNAL_DIVERSITY: fetch_token_diversity(self._reader, wallet),
            SIGNAL_CONTRACTS: fetch_contract_usage(self._reader, wallet, self._fetch),
            SIGNAL_RED_FLAGS: fetch_red_flag_inputs(self._reader, wallet, self._fetch, self._scoring, now),
            SIGNAL_HISTORY: history,
        }
        tasks = {
            name: asyncio.ensure_future(self._guarded(name, fetch, defaults[name], wallet))
            for name, fetch in fetches.items()
        }
        try:
            done, pending = await asyncio.wait(tasks.values(), timeout=self._fetch.total_timeout_sec)
        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                "bytescore_signals_incomplete",
                wallet=short_wallet(wallet),
                unresolved=sorted(name for name, task in tasks.items() if task in pending),
            )

        values = {
            name: task.result() if task in done and not task.cancelled() else defaults[name]
            for name, task in tasks.items()
        }
        activity: TransactionActivity = values[SIGNAL_TRANSACTIONS]
        flags: RedFlagInputs = values[SIGNAL_RED_FLAGS]
        return RawSignals(
            wallet_age_days=int(values[SIGNAL_WALLET_AGE]),
            tx_count=activity.count,
            volume=activity.volume_sol,
            unique_token_types=int(values[SIGNAL_DIVERSITY]),
            contract_interactions=int(values[SIGNAL_CONTRACTS]),
            failed_tx_ratio=flags.failed_tx_ratio,
            inactive_days=flags.inactive_days,
            repayment_ratio=values[SIGNAL_HISTORY].ratio,
        )

    async def compute_reputation_score(self, account_id: str) -> ScoreResult:
        """ByteScore for account_id; the neutral default for invalid ids or internal errors."""
        try:
            require_valid_account_id(account_id, require_on_curve=self._fetch.require_on_curve)
        except InvalidIdentifier as e:
            logger.warning("bytescore_invalid_identifier", wallet=short_wallet(str(account_id or "")), reason=e.reason)
            return default_score_result(self._scoring)

        wallet = account_id.strip()
        try:
            signals = await self.collect_signals(wallet)
            result = compose_score(signals, self._scoring)
        except Exception as e:
            logger.error("bytescore_computation_failed", wallet=short_wallet(wallet), error=str(e), exc_info=True)
            return default_score_result(self._scoring)

        logger.info(
            "bytescore_computed",
            wallet=short_wallet(wallet),
            score=result.score,
            red_flags=result.breakdown.red_flags,
        )
        return result


async def compute_reputation_score(account_id: str, settings: Settings | None = None) -> ScoreResult:
    """
    Compute a ByteScore against the configured Solana RPC endpoint.

    Opens a SolanaLedgerReader for the duration of the call; platform history
    is read from the configured ByteBonds program.
    """
    settings = settings or get_settings()
    scoring = settings.scoring
    try:
        reader = SolanaLedgerReader(settings.solana_rpc_url, timeout=settings.fetch.fetch_timeout_sec or 10.0)
    except Exception as e:
        logger.error("bytescore_reader_init_failed", error=str(e))
        return default_score_result(scoring)

    async with reader:
        history = BondRepaymentHistory(reader, settings.bytebonds_program_id, scoring.neutral_repayment_ratio)
        engine = ByteScoreEngine(reader, history, scoring, settings.fetch)
        return await engine.compute_reputation_score(account_id)
