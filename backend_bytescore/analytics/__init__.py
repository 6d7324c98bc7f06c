"""
ByteScore analytics engine.

Turns raw ledger activity into a bounded 0-100 reputation score.
Modules: signals, platform_history, normalizer, risk_engine, trust_engine, bytescore.
"""

from backend_bytescore.analytics.bytescore import ByteScoreEngine, compute_reputation_score
from backend_bytescore.analytics.models import (
    RawSignals,
    ScoreBreakdown,
    ScoreResult,
    default_score_result,
)
from backend_bytescore.analytics.trust_engine import compose_score, score_to_risk_level

__all__ = [
    "ByteScoreEngine",
    "RawSignals",
    "ScoreBreakdown",
    "ScoreResult",
    "compose_score",
    "compute_reputation_score",
    "default_score_result",
    "score_to_risk_level",
]
