"""
Backend ByteScore: reputation scoring for ByteBonds accounts.

Reads Solana ledger activity and ByteBonds repayment history for an account
and computes a bounded 0-100 trust score with an auditable breakdown.
Modular layout: ledger reader, analytics engine, API server, CLI tools.
"""

__version__ = "0.1.0"
