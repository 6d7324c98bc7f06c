"""
Application-level exceptions.

None of these cross the scoring facade: InvalidIdentifier and ComputationDefect
become the neutral default result, SignalFetchFailure becomes the failing
signal's default value.
"""

from __future__ import annotations


class ByteScoreError(Exception):
    """Base class for ByteScore errors."""


class InvalidIdentifier(ByteScoreError):
    """Account identifier is not a valid Solana wallet address."""

    def __init__(self, account_id: str, reason: str = "invalid address format") -> None:
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"Invalid account identifier {account_id[:16]!r}: {reason}")


class SignalFetchFailure(ByteScoreError):
    """A ledger query failed, timed out, or returned a malformed response."""

    def __init__(self, method: str, detail: str) -> None:
        self.method = method
        self.detail = detail
        super().__init__(f"{method} failed: {detail}")


class ComputationDefect(ByteScoreError):
    """An internal invariant of normalization or composition was violated."""
