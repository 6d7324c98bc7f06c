"""
FastAPI router: GET /bytescore?address=<wallet>.

Computes the ByteScore live through the analytics facade. Missing address is a
client error; any other input (including malformed addresses) gets the
computed or neutral default result, since fallback lives in the facade.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_bytescore.analytics.bytescore import compute_reputation_score
from backend_bytescore.analytics.models import ScoreResult
from backend_bytescore.bytescore_logging import get_logger, short_wallet

logger = get_logger(__name__)

router = APIRouter(tags=["bytescore"])

ScoreFunction = Callable[[str], Awaitable[ScoreResult]]


class BreakdownResponse(BaseModel):
    """Rounded point contributions; redFlags is subtracted."""

    walletAge: int = Field(..., ge=0, description="Wallet age points (max 15)")
    transactionFrequency: int = Field(..., ge=0, description="Transaction frequency points (max 20)")
    volume: int = Field(..., ge=0, description="SOL volume points (max 20)")
    diversity: int = Field(..., ge=0, description="Token diversity points (max 10)")
    contractUsage: int = Field(..., ge=0, description="Program usage points (max 10)")
    repaymentHistory: int = Field(..., ge=0, description="ByteBonds repayment points (max 20)")
    redFlags: int = Field(..., ge=0, le=20, description="Red-flag penalty points")


class MetricsResponse(BaseModel):
    """Raw signals the score was computed from."""

    walletAgeDays: int = Field(..., ge=0)
    transactionCount: int = Field(..., ge=0)
    volumeSOL: float = Field(..., ge=0)
    uniqueTokens: int = Field(..., ge=0)
    contractInteractions: int = Field(..., ge=0)
    repaymentRatio: float = Field(..., ge=0, le=1)
    failedTransactionRatio: float = Field(..., ge=0, le=1)
    inactiveDays: int = Field(..., ge=0)


class ByteScoreResponse(BaseModel):
    """GET /bytescore response."""

    score: int = Field(..., ge=0, le=100, description="ByteScore (0-100)")
    breakdown: BreakdownResponse
    metrics: MetricsResponse

    @classmethod
    def from_result(cls, result: ScoreResult) -> "ByteScoreResponse":
        return cls.model_validate(result.to_dict())


def get_score_function() -> ScoreFunction:
    """Dependency: the scoring entrypoint (overridden in tests)."""
    return compute_reputation_score


@router.get("/bytescore", response_model=ByteScoreResponse)
async def get_bytescore(
    address: str | None = Query(None, description="Solana wallet address (base58)"),
    score_fn: ScoreFunction = Depends(get_score_function),
):
    address = (address or "").strip()
    if not address:
        return JSONResponse(status_code=400, content={"error": "Wallet address is required"})
    try:
        result = await score_fn(address)
        return ByteScoreResponse.from_result(result)
    except Exception:
        logger.exception("bytescore_api_failed", wallet=short_wallet(address))
        return JSONResponse(status_code=500, content={"error": "Failed to calculate ByteScore"})
