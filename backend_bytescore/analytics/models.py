"""
ByteScore data model: raw signals, score breakdown and result.

All records are frozen; a RawSignals snapshot and its ScoreResult are built
fresh per request. to_dict()/from_dict() implement the JSON transport format
consumed by the dashboard (camelCase keys).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from backend_bytescore.config.settings import ScoringConfig


def round_half_up(value: float) -> int:
    """Round to nearest int, halves away from zero for positives (JS Math.round)."""
    return int(math.floor(round(value, 9) + 0.5))


@dataclass(frozen=True)
class RawSignals:
    """Immutable snapshot of one account's fetched activity signals."""

    wallet_age_days: int = 0
    tx_count: int = 0
    volume: float = 0.0
    unique_token_types: int = 0
    contract_interactions: int = 0
    failed_tx_ratio: float = 0.0
    inactive_days: int = 0
    repayment_ratio: float = 0.0

    def has_activity(self) -> bool:
        return any(
            (
                self.wallet_age_days,
                self.tx_count,
                self.volume,
                self.unique_token_types,
                self.contract_interactions,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "walletAgeDays": self.wallet_age_days,
            "transactionCount": self.tx_count,
            "volumeSOL": self.volume,
            "uniqueTokens": self.unique_token_types,
            "contractInteractions": self.contract_interactions,
            "repaymentRatio": self.repayment_ratio,
            "failedTransactionRatio": self.failed_tx_ratio,
            "inactiveDays": self.inactive_days,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawSignals":
        return cls(
            wallet_age_days=int(data["walletAgeDays"]),
            tx_count=int(data["transactionCount"]),
            volume=float(data["volumeSOL"]),
            unique_token_types=int(data["uniqueTokens"]),
            contract_interactions=int(data["contractInteractions"]),
            failed_tx_ratio=float(data["failedTransactionRatio"]),
            inactive_days=int(data["inactiveDays"]),
            repayment_ratio=float(data["repaymentRatio"]),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """Rounded point contributions; red_flags is the subtracted penalty."""

    wallet_age: int
    transaction_frequency: int
    volume: int
    diversity: int
    contract_usage: int
    repayment_history: int
    red_flags: int

    def to_dict(self) -> dict[str, int]:
        return {
            "walletAge": self.wallet_age,
            "transactionFrequency": self.transaction_frequency,
            "volume": self.volume,
            "diversity": self.diversity,
            "contractUsage": self.contract_usage,
            "repaymentHistory": self.repayment_history,
            "redFlags": self.red_flags,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScoreBreakdown":
        return cls(
            wallet_age=int(data["walletAge"]),
            transaction_frequency=int(data["transactionFrequency"]),
            volume=int(data["volume"]),
            diversity=int(data["diversity"]),
            contract_usage=int(data["contractUsage"]),
            repayment_history=int(data["repaymentHistory"]),
            red_flags=int(data["redFlags"]),
        )


@dataclass(frozen=True)
class ScoreResult:
    """Final ByteScore: bounded score, per-signal breakdown, raw metrics."""

    score: int
    breakdown: ScoreBreakdown
    metrics: RawSignals

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
            "metrics": self.metrics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScoreResult":
        return cls(
            score=int(data["score"]),
            breakdown=ScoreBreakdown.from_dict(data["breakdown"]),
            metrics=RawSignals.from_dict(data["metrics"]),
        )


def default_score_result(config: ScoringConfig | None = None) -> ScoreResult:
    """
    Neutral result for invalid identifiers, empty accounts and internal errors.

    Score is the configured default (50). The breakdown is pre-set at half of
    each weight's maximum, except wallet age, which is 0 for an unknown
    account. Metrics are zeroed except the neutral repayment ratio.
    """
    config = config or ScoringConfig()
    half = {name: round_half_up(weight * 100 * 0.5) for name, weight in config.weights.items()}
    half["wallet_age"] = 0
    return ScoreResult(
        score=config.default_score,
        breakdown=ScoreBreakdown(red_flags=0, **half),
        metrics=RawSignals(repayment_ratio=config.neutral_repayment_ratio),
    )
