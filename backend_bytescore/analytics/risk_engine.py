"""
Red-flag penalty: bounded deduction from failure ratio, inactivity and low activity.

Rules are additive and all evaluated:
  failed_tx_ratio > 0.30  ->  10 * (ratio - 0.30) / 0.70
  inactive_days > 30      ->  10 * min(inactive_days / 90, 1)
  tx_count < 5            ->  5 * (1 - tx_count / 5)
The sum is clamped to [0, 20].
"""

from __future__ import annotations

from backend_bytescore.config.settings import ScoringConfig

FLAG_HIGH_FAILURE_RATE = "high_failure_rate"
FLAG_INACTIVE = "inactive"
FLAG_LOW_ACTIVITY = "low_activity"


def red_flag_components(
    failed_tx_ratio: float,
    inactive_days: int,
    tx_count: int,
    config: ScoringConfig,
) -> dict[str, float]:
    """Per-rule penalty points, keyed by flag name; only triggered rules appear."""
    components: dict[str, float] = {}

    threshold = config.failed_tx_threshold
    if failed_tx_ratio > threshold:
        components[FLAG_HIGH_FAILURE_RATE] = (
            config.failed_tx_max_penalty * (failed_tx_ratio - threshold) / (1 - threshold)
        )

    if inactive_days > config.inactive_days_threshold:
        components[FLAG_INACTIVE] = config.inactive_max_penalty * min(
            inactive_days / config.inactive_days_saturation, 1.0
        )

    low = config.low_activity_tx_threshold
    if tx_count < low:
        components[FLAG_LOW_ACTIVITY] = config.low_activity_max_penalty * (1 - tx_count / low)

    return components


def calculate_red_flag_penalty(
    failed_tx_ratio: float,
    inactive_days: int,
    tx_count: int,
    config: ScoringConfig,
) -> float:
    """Total red-flag penalty in [0, max_red_flag_penalty]."""
    penalty = sum(red_flag_components(failed_tx_ratio, inactive_days, tx_count, config).values())
    return max(0.0, min(config.max_red_flag_penalty, penalty))
