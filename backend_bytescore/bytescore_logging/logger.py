"""
ByteScore log setup.

Every module logs through get_logger(__name__) with snake_case event names and
the account passed as wallet=short_wallet(addr). Lines go to stderr so the CLI
can keep stdout for the score itself.

LOG_LEVEL and LOG_FORMAT (json | console) are read once, the first time the
package is imported; call configure_structlog() to change them afterwards.
Imports nothing from backend_bytescore, so any module may import it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog

WALLET_DISPLAY_LEN = 16


def short_wallet(wallet: str | None) -> str:
    """Account id truncated for log lines."""
    wallet = wallet or ""
    if len(wallet) > WALLET_DISPLAY_LEN:
        return wallet[:WALLET_DISPLAY_LEN] + "..."
    return wallet


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    # aggregation keys on event_type rather than structlog's "event"
    event_dict["event_type"] = event_dict.pop("event", None)
    return event_dict


def configure_structlog(level: str = "INFO", fmt: str = "json", stream: TextIO | None = None) -> None:
    """
    (Re)configure structlog.

    fmt="json" renders one JSON object per line keyed by event_type; anything
    else uses the colored console renderer. Unknown level names mean INFO.
    """
    level_value = logging.getLevelName(level.strip().upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO
    out = stream if stream is not None else sys.stderr

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.format_exc_info,
    ]
    if fmt.strip().lower() == "json":
        processors += [_event_type, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=out.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FORMAT", "json"))


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger bound to the module name:

        logger = get_logger(__name__)
        logger.info("bytescore_computed", wallet=short_wallet(addr), score=72)
    """
    return structlog.get_logger(name).bind(logger=name)
