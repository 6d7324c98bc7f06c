"""Wallet validation utilities."""

from __future__ import annotations

from solders.pubkey import Pubkey

from backend_bytescore.core.exceptions import InvalidIdentifier


def require_valid_account_id(account_id: str, require_on_curve: bool = True) -> Pubkey:
    """
    Parse a base58 Solana address into a Pubkey.

    With require_on_curve, program-derived addresses (off the ed25519 curve)
    are rejected: they cannot sign and so cannot be wallet owners.
    Raises InvalidIdentifier.
    """
    if not isinstance(account_id, str) or not account_id.strip():
        raise InvalidIdentifier(str(account_id or ""), "empty address")
    try:
        pubkey = Pubkey.from_string(account_id.strip())
    except Exception as e:
        raise InvalidIdentifier(account_id, str(e)) from e
    if require_on_curve and not pubkey.is_on_curve():
        raise InvalidIdentifier(account_id, "address is not on curve")
    return pubkey
