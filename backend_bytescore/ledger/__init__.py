"""
Ledger package: read-only Solana query surface for the scoring engine.
"""

from backend_bytescore.ledger.models import (
    ProgramAccount,
    SignatureInfo,
    TransactionDetails,
)
from backend_bytescore.ledger.reader import LedgerReader, SolanaLedgerReader

__all__ = [
    "LedgerReader",
    "ProgramAccount",
    "SignatureInfo",
    "SolanaLedgerReader",
    "TransactionDetails",
]
