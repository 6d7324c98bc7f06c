"""
Normalized ledger records returned by the ledger reader.

RPC responses arrive either as solders objects (solana-py) or as plain
JSON-RPC dicts; the from_rpc_* constructors accept both shapes so the signal
fetchers only ever see these frozen dataclasses.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any

LAMPORTS_PER_SOL = 1_000_000_000


def _field(obj: Any, *names: str) -> Any:
    """First non-None attribute / key among names; works for objects and dicts."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _key_str(key: Any) -> str:
    """Account key as base58 string: plain str/Pubkey, or parsed {pubkey: ...} entry."""
    if isinstance(key, dict):
        return str(key.get("pubkey", ""))
    pubkey = getattr(key, "pubkey", None)
    if pubkey is not None:
        return str(pubkey)
    return str(key)


def _as_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def raw_bytes_from_account_data(data: Any) -> bytes | None:
    """
    Normalize account.data to bytes.
    Handles bytes, base64 str, ["<base64>", "base64"] lists, lists of ints and
    objects wrapping any of these in a .data attribute.
    """
    if data is None:
        return None
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        try:
            return base64.b64decode(data)
        except ValueError:
            return None
    if isinstance(data, (list, tuple)):
        if not data:
            return None
        first = data[0]
        if isinstance(first, str):
            try:
                return base64.b64decode(first)
            except ValueError:
                return None
        if isinstance(first, int):
            return bytes(data)
        return None
    if hasattr(data, "data"):
        return raw_bytes_from_account_data(getattr(data, "data"))
    return None


@dataclass(frozen=True)
class SignatureInfo:
    """One getSignaturesForAddress entry (newest first in RPC order)."""

    signature: str
    slot: int | None
    err: Any  # None if the transaction succeeded
    block_time: int | None  # Unix timestamp; None if not available

    @property
    def failed(self) -> bool:
        return self.err is not None

    @classmethod
    def from_rpc_item(cls, item: Any) -> "SignatureInfo":
        """Build from a solders RpcConfirmedTransactionStatusWithSignature or dict."""
        return cls(
            signature=str(_field(item, "signature") or ""),
            slot=_as_int(_field(item, "slot")),
            err=_field(item, "err"),
            block_time=_as_int(_field(item, "block_time", "blockTime")),
        )


def _program_ids(message: Any, meta: Any, account_keys: list[str]) -> frozenset[str]:
    """
    Program ids from message.instructions and meta.inner_instructions.
    Parsed instructions carry programId; raw (json) ones carry programIdIndex.
    """
    programs: set[str] = set()

    def _add(ix: Any) -> None:
        pid = _field(ix, "program_id", "programId")
        if pid is not None:
            programs.add(str(pid))
            return
        idx = _as_int(_field(ix, "program_id_index", "programIdIndex"))
        if idx is not None and 0 <= idx < len(account_keys):
            programs.add(account_keys[idx])

    for ix in _field(message, "instructions") or []:
        _add(ix)
    for group in _field(meta, "inner_instructions", "innerInstructions") or []:
        for inner_ix in _field(group, "instructions") or []:
            _add(inner_ix)
    return frozenset(programs)


@dataclass(frozen=True)
class TransactionDetails:
    """The parts of a getTransaction result the fetchers need."""

    signature: str
    block_time: int | None
    failed: bool
    account_keys: tuple[str, ...] = ()
    pre_balances: tuple[int, ...] = ()
    post_balances: tuple[int, ...] = ()
    program_ids: frozenset[str] = field(default_factory=frozenset)

    def balance_change_sol(self, account: str) -> float:
        """Absolute SOL balance change of account in this transaction (0.0 if absent)."""
        try:
            idx = self.account_keys.index(account)
        except ValueError:
            return 0.0
        if idx >= len(self.pre_balances) or idx >= len(self.post_balances):
            return 0.0
        return abs(self.pre_balances[idx] - self.post_balances[idx]) / LAMPORTS_PER_SOL

    @classmethod
    def from_rpc_value(cls, signature: str, value: Any) -> "TransactionDetails":
        """
        Build from getTransaction .value.

        solders nests the transaction one level deeper
        (value.transaction.transaction / value.transaction.meta) than the raw
        JSON-RPC result (value["transaction"] / value["meta"]).
        """
        outer = _field(value, "transaction")
        meta = _field(value, "meta")
        if meta is None:
            meta = _field(outer, "meta")
        tx = outer
        if not isinstance(outer, dict) and _field(outer, "message") is None:
            tx = _field(outer, "transaction")
        message = _field(tx, "message")
        keys = [_key_str(k) for k in (_field(message, "account_keys", "accountKeys") or [])]
        pre = tuple(int(b or 0) for b in (_field(meta, "pre_balances", "preBalances") or []))
        post = tuple(int(b or 0) for b in (_field(meta, "post_balances", "postBalances") or []))
        return cls(
            signature=signature,
            block_time=_as_int(_field(value, "block_time", "blockTime")),
            failed=_field(meta, "err") is not None,
            account_keys=tuple(keys),
            pre_balances=pre,
            post_balances=post,
            program_ids=_program_ids(message, meta, keys),
        )


@dataclass(frozen=True)
class ProgramAccount:
    """A getProgramAccounts entry: account address and raw data."""

    pubkey: str
    data: bytes

    @classmethod
    def from_rpc_item(cls, item: Any) -> "ProgramAccount | None":
        pubkey = _field(item, "pubkey")
        data = raw_bytes_from_account_data(_field(_field(item, "account"), "data"))
        if pubkey is None or data is None:
            return None
        return cls(pubkey=str(pubkey), data=data)


def mint_from_token_account(acct: Any) -> str | None:
    """
    Mint of a jsonParsed token account: account.data.parsed["info"]["mint"].
    Returns None when the entry is not parsed token data.
    """
    data = _field(_field(acct, "account"), "data")
    parsed = _field(data, "parsed")
    info = _field(parsed, "info")
    mint = _field(info, "mint") if isinstance(info, dict) else None
    return str(mint) if mint else None
