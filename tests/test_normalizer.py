"""
Normalizer tests: linear clamp of each raw signal to [0, 1].
"""

from __future__ import annotations

import pytest

from backend_bytescore.analytics.models import RawSignals
from backend_bytescore.analytics.normalizer import normalize, normalize_signals
from backend_bytescore.config.settings import ScoringConfig
from backend_bytescore.core.exceptions import ComputationDefect


def test_normalize_linear_below_cap():
    assert normalize(182.5, 365) == pytest.approx(0.5)
    assert normalize(0, 1000) == 0.0


def test_normalize_clamps_at_cap():
    """Values at or above the cap saturate at 1.0."""
    assert normalize(365, 365) == 1.0
    assert normalize(5000, 365) == 1.0


def test_normalize_floors_negative_at_zero():
    assert normalize(-3, 10) == 0.0


def test_normalize_rejects_non_positive_cap():
    with pytest.raises(ComputationDefect):
        normalize(1, 0)
    with pytest.raises(ComputationDefect):
        normalize(1, -5)


def test_normalize_signals_uses_configured_caps():
    signals = RawSignals(
        wallet_age_days=73,
        tx_count=250,
        volume=2000.0,
        unique_token_types=3,
        contract_interactions=50,
        repayment_ratio=0.8,
    )
    n = normalize_signals(signals, ScoringConfig())
    assert n.wallet_age == pytest.approx(0.2)
    assert n.transaction_frequency == pytest.approx(0.25)
    assert n.volume == 1.0
    assert n.diversity == pytest.approx(0.3)
    assert n.contract_usage == pytest.approx(0.5)
    assert n.repayment_history == pytest.approx(0.8)


def test_normalize_signals_alternate_config():
    """Alternate caps are honored without touching module state."""
    config = ScoringConfig(max_token_types=5)
    n = normalize_signals(RawSignals(unique_token_types=3), config)
    assert n.diversity == pytest.approx(0.6)
