"""
Metric normalizer: map each raw signal to a [0, 1] fraction of its cap.

Linear clamp, no smoothing, so every subscore can be audited by hand.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_bytescore.analytics.models import RawSignals
from backend_bytescore.config.settings import ScoringConfig
from backend_bytescore.core.exceptions import ComputationDefect


@dataclass(frozen=True)
class NormalizedSignals:
    wallet_age: float
    transaction_frequency: float
    volume: float
    diversity: float
    contract_usage: float
    repayment_history: float


def normalize(raw: float, cap: float) -> float:
    """min(raw / cap, 1.0), floored at 0. Raises ComputationDefect for cap <= 0."""
    if cap <= 0:
        raise ComputationDefect(f"normalization cap must be positive, got {cap}")
    return max(0.0, min(raw / cap, 1.0))


def normalize_signals(signals: RawSignals, config: ScoringConfig) -> NormalizedSignals:
    return NormalizedSignals(
        wallet_age=normalize(signals.wallet_age_days, config.max_wallet_age_days),
        transaction_frequency=normalize(signals.tx_count, config.max_tx_count),
        volume=normalize(signals.volume, config.max_volume_sol),
        diversity=normalize(signals.unique_token_types, config.max_token_types),
        contract_usage=normalize(signals.contract_interactions, config.max_contract_interactions),
        repayment_history=normalize(signals.repayment_ratio, config.max_repayment_ratio),
    )
