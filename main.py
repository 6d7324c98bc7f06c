"""
Main entrypoint: ByteScore FastAPI server.

Env: SOLANA_RPC_URL, SOLANA_NETWORK, BYTEBONDS_PROGRAM_ID, API_HOST, API_PORT,
BYTESCORE_FETCH_TIMEOUT_SEC, BYTESCORE_TOTAL_TIMEOUT_SEC, LOG_LEVEL, LOG_FORMAT.

Equivalent: uvicorn backend_bytescore.api_server.app:app --host 0.0.0.0 --port 8000
"""

import uvicorn

# Configure structured JSON logging before other imports that may log
from backend_bytescore.bytescore_logging import get_logger
from backend_bytescore.config import get_settings

logger = get_logger("main")


def main() -> None:
    settings = get_settings()
    logger.info("main_starting", api_host=settings.api_host, api_port=settings.api_port)
    uvicorn.run(
        "backend_bytescore.api_server.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
