"""
Score composer: weighted subscores minus red-flag penalty -> 0-100 ByteScore.

score_i = normalized_i * 100 * weight_i for the six positive signals;
total = clamp(sum(score_i) - penalty, 0, 100). The total and every breakdown
field are rounded half-up independently, so the breakdown may not sum exactly
to the score. Pure function of (RawSignals, ScoringConfig).
"""

from __future__ import annotations

from backend_bytescore.analytics.models import (
    RawSignals,
    ScoreBreakdown,
    ScoreResult,
    default_score_result,
    round_half_up,
)
from backend_bytescore.analytics.normalizer import normalize_signals
from backend_bytescore.analytics.risk_engine import calculate_red_flag_penalty
from backend_bytescore.bytescore_logging import get_logger
from backend_bytescore.config.settings import ScoringConfig
from backend_bytescore.core.exceptions import ComputationDefect

logger = get_logger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100

RISK_VERY_LOW = "Very Low Risk"
RISK_LOW = "Low Risk"
RISK_MODERATE = "Moderate Risk"
RISK_HIGH = "High Risk"
RISK_VERY_HIGH = "Very High Risk"


def is_empty_account(signals: RawSignals, config: ScoringConfig) -> bool:
    """No ledger activity at all and no platform repayment history."""
    return not signals.has_activity() and signals.repayment_ratio == config.neutral_repayment_ratio


def compose_score(signals: RawSignals, config: ScoringConfig | None = None) -> ScoreResult:
    """
    Compose the final ScoreResult from a RawSignals snapshot.

    Accounts with no observed activity and no repayment history get the
    neutral default result. Raises ComputationDefect if an invariant breaks.
    """
    config = config or ScoringConfig()
    if is_empty_account(signals, config):
        return default_score_result(config)

    normalized = normalize_signals(signals, config)
    subscores = {
        "wallet_age": normalized.wallet_age * 100 * config.wallet_age_weight,
        "transaction_frequency": normalized.transaction_frequency * 100 * config.tx_frequency_weight,
        "volume": normalized.volume * 100 * config.volume_weight,
        "diversity": normalized.diversity * 100 * config.diversity_weight,
        "contract_usage": normalized.contract_usage * 100 * config.contract_usage_weight,
        "repayment_history": normalized.repayment_history * 100 * config.repayment_weight,
    }
    penalty = calculate_red_flag_penalty(
        signals.failed_tx_ratio, signals.inactive_days, signals.tx_count, config
    )

    total = sum(subscores.values()) - penalty
    total = max(SCORE_MIN, min(SCORE_MAX, total))
    score = round_half_up(total)

    breakdown = ScoreBreakdown(
        red_flags=round_half_up(penalty),
        **{name: round_half_up(value) for name, value in subscores.items()},
    )
    if not SCORE_MIN <= score <= SCORE_MAX or breakdown.red_flags > config.max_red_flag_penalty:
        raise ComputationDefect(f"score out of bounds: score={score} red_flags={breakdown.red_flags}")

    logger.debug(
        "trust_engine_result",
        score=score,
        penalty=round(penalty, 4),
        subscores={k: round(v, 4) for k, v in subscores.items()},
    )
    return ScoreResult(score=score, breakdown=breakdown, metrics=signals)


def score_to_risk_level(score: int) -> str:
    """Dashboard risk label for a ByteScore."""
    if score >= 80:
        return RISK_VERY_LOW
    if score >= 60:
        return RISK_LOW
    if score >= 40:
        return RISK_MODERATE
    if score >= 20:
        return RISK_HIGH
    return RISK_VERY_HIGH
