"""
Structured logging for ByteScore: JSON lines on stderr via structlog.
"""

from backend_bytescore.bytescore_logging.logger import configure_structlog, get_logger, short_wallet

__all__ = ["configure_structlog", "get_logger", "short_wallet"]
