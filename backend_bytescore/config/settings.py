"""
Application settings and scoring configuration.

- ScoringConfig: weights, normalization caps and red-flag thresholds. Immutable;
  passed into the scoring engine so alternate configurations can be substituted.
- FetchConfig: RPC windows, sample sizes and timeouts for the signal fetchers.
- Settings: environment-derived service configuration (RPC URL, program ID,
  API host/port) plus the two configs above.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass, field

from backend_bytescore.config.env import (
    get_bool_env,
    get_bytebonds_program_id,
    get_float_env,
    get_solana_network,
    get_solana_rpc_url,
)

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"


@dataclass(frozen=True)
class ScoringConfig:
    """Weights, caps and thresholds for ByteScore. Positive weights sum to 0.95."""

    wallet_age_weight: float = 0.15
    tx_frequency_weight: float = 0.20
    volume_weight: float = 0.20
    diversity_weight: float = 0.10
    contract_usage_weight: float = 0.10
    repayment_weight: float = 0.20

    max_wallet_age_days: float = 365
    max_tx_count: float = 1000
    max_volume_sol: float = 1000
    max_token_types: float = 10
    max_contract_interactions: float = 100
    max_repayment_ratio: float = 1.0

    failed_tx_threshold: float = 0.30
    failed_tx_max_penalty: float = 10.0
    inactive_days_threshold: int = 30
    inactive_days_saturation: float = 90
    inactive_max_penalty: float = 10.0
    low_activity_tx_threshold: int = 5
    low_activity_max_penalty: float = 5.0
    max_red_flag_penalty: float = 20.0

    default_score: int = 50
    neutral_repayment_ratio: float = 0.5
    # Moderate inactivity for accounts whose history cannot be read
    default_inactive_days: int = 182

    @property
    def weights(self) -> dict[str, float]:
        return {
            "wallet_age": self.wallet_age_weight,
            "transaction_frequency": self.tx_frequency_weight,
            "volume": self.volume_weight,
            "diversity": self.diversity_weight,
            "contract_usage": self.contract_usage_weight,
            "repayment_history": self.repayment_weight,
        }


@dataclass(frozen=True)
class FetchConfig:
    """RPC windows and timeouts. Timeouts are in seconds; None disables them."""

    tx_count_window: int = 100
    volume_sample_size: int = 10
    contract_signature_window: int = 20
    contract_tx_sample: int = 10
    red_flag_window: int = 20
    wallet_age_page_size: int = 1000
    wallet_age_max_pages: int = 10
    fetch_timeout_sec: float | None = 10.0
    total_timeout_sec: float | None = 20.0
    require_on_curve: bool = True
    system_program_id: str = SYSTEM_PROGRAM_ID


def _fetch_config_from_env() -> FetchConfig:
    return FetchConfig(
        fetch_timeout_sec=get_float_env("BYTESCORE_FETCH_TIMEOUT_SEC", 10.0),
        total_timeout_sec=get_float_env("BYTESCORE_TOTAL_TIMEOUT_SEC", 20.0),
        require_on_curve=get_bool_env("BYTESCORE_REQUIRE_ON_CURVE", True),
    )


@dataclass(frozen=True)
class Settings:
    """Service configuration resolved from environment variables and .env."""

    solana_network: str = field(default_factory=get_solana_network)
    solana_rpc_url: str = field(default_factory=get_solana_rpc_url)
    bytebonds_program_id: str = field(default_factory=get_bytebonds_program_id)
    api_host: str = field(default_factory=lambda: (os.getenv("API_HOST") or "0.0.0.0").strip())
    api_port: int = field(default_factory=lambda: int((os.getenv("API_PORT") or "8000").strip() or "8000"))
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    fetch: FetchConfig = field(default_factory=_fetch_config_from_env)


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings (cached).

    Call get_settings.cache_clear() after changing the environment in tests.
    """
    return Settings()
