"""
FastAPI server: ByteScore HTTP API.

Exposes GET /api/bytescore?address=... (live score computation) and /health.
Config via env (see backend_bytescore.config).
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend_bytescore import __version__
from backend_bytescore.api_server.bytescore import router as bytescore_router
from backend_bytescore.bytescore_logging import get_logger
from backend_bytescore.config import get_settings
from backend_bytescore.config.env import masked_rpc_url

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "api_started",
        network=settings.solana_network,
        rpc=masked_rpc_url(settings.solana_rpc_url),
        program_id=settings.bytebonds_program_id,
    )
    yield
    logger.info("api_stopped")


app = FastAPI(
    title="ByteScore API",
    description="Reputation scores for ByteBonds accounts, computed from Solana ledger activity.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(bytescore_router, prefix="/api", tags=["ByteScore"])


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}
