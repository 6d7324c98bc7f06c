"""
Ledger reader: read-only Solana queries used by the ByteScore signal fetchers.

LedgerReader is the protocol the engine depends on; SolanaLedgerReader
implements it on solana-py's AsyncClient. Every RPC error or malformed
response surfaces as SignalFetchFailure so fetchers can substitute defaults.
The reader never submits transactions.
"""

from __future__ import annotations

from typing import Any, Protocol

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.types import MemcmpOpts, TokenAccountOpts
from solders.pubkey import Pubkey
from solders.signature import Signature

from backend_bytescore.bytescore_logging import get_logger
from backend_bytescore.core.exceptions import SignalFetchFailure
from backend_bytescore.ledger.models import (
    ProgramAccount,
    SignatureInfo,
    TransactionDetails,
    mint_from_token_account,
)

logger = get_logger(__name__)

TOKEN_PROGRAM_ID_STR = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID_STR = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
TOKEN_PROGRAM_IDS = (TOKEN_PROGRAM_ID_STR, TOKEN_2022_PROGRAM_ID_STR)


class LedgerReader(Protocol):
    """Read-only ledger query surface consumed by the signal fetchers."""

    async def get_signatures(
        self, address: str, limit: int, before: str | None = None
    ) -> list[SignatureInfo]:
        """Signatures for address, newest first."""
        ...

    async def get_transaction(self, signature: str) -> TransactionDetails | None:
        ...

    async def get_token_mints(self, owner: str) -> list[str]:
        """Mints of every token account owned by owner."""
        ...

    async def get_program_accounts(
        self, program_id: str, offset: int, match: str
    ) -> list[ProgramAccount]:
        """Accounts of program_id whose data holds the base58 value match at offset."""
        ...


def _get_resp_value(resp: Any) -> Any:
    if resp is None:
        return None
    v = getattr(resp, "value", None)
    if v is not None:
        return v
    if isinstance(resp, dict):
        result = resp.get("result")
        if isinstance(result, dict) and "value" in result:
            return result.get("value")
        return result
    return None


class SolanaLedgerReader:
    """
    LedgerReader over solana-py AsyncClient.

    Use as an async context manager (or call close()) to release the HTTP
    session. An existing client can be injected for tests.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: Commitment = Confirmed,
        timeout: float = 10.0,
        client: Any = None,
    ) -> None:
        self._commitment = commitment
        self._client = client if client is not None else AsyncClient(rpc_url, commitment=commitment, timeout=timeout)

    async def __aenter__(self) -> "SolanaLedgerReader":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        # a failed close must not mask the result or error of the block
        try:
            await self.close()
        except Exception as e:
            logger.warning("ledger_reader_close_failed", error=str(e))

    async def close(self) -> None:
        await self._client.close()

    async def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        try:
            resp = await getattr(self._client, method)(*args, **kwargs)
        except SignalFetchFailure:
            raise
        except Exception as e:
            raise SignalFetchFailure(method, str(e)) from e
        return _get_resp_value(resp)

    async def get_signatures(
        self, address: str, limit: int, before: str | None = None
    ) -> list[SignatureInfo]:
        try:
            pubkey = Pubkey.from_string(address)
            before_sig = Signature.from_string(before) if before else None
        except Exception as e:
            raise SignalFetchFailure("get_signatures_for_address", str(e)) from e
        value = await self._call(
            "get_signatures_for_address",
            pubkey,
            before=before_sig,
            limit=limit,
            commitment=self._commitment,
        )
        if value is None:
            return []
        try:
            return [SignatureInfo.from_rpc_item(item) for item in value]
        except TypeError as e:
            raise SignalFetchFailure("get_signatures_for_address", f"malformed response: {e}") from e

    async def get_transaction(self, signature: str) -> TransactionDetails | None:
        try:
            sig = Signature.from_string(signature)
        except Exception as e:
            raise SignalFetchFailure("get_transaction", str(e)) from e
        value = await self._call(
            "get_transaction",
            sig,
            encoding="jsonParsed",
            commitment=self._commitment,
            max_supported_transaction_version=0,
        )
        if value is None:
            logger.debug("ledger_tx_value_none", signature=signature[:44])
            return None
        try:
            return TransactionDetails.from_rpc_value(signature, value)
        except (TypeError, ValueError) as e:
            raise SignalFetchFailure("get_transaction", f"malformed response: {e}") from e

    async def get_token_mints(self, owner: str) -> list[str]:
        try:
            pubkey = Pubkey.from_string(owner)
        except Exception as e:
            raise SignalFetchFailure("get_token_accounts_by_owner_json_parsed", str(e)) from e
        mints: list[str] = []
        for program_id in TOKEN_PROGRAM_IDS:
            value = await self._call(
                "get_token_accounts_by_owner_json_parsed",
                pubkey,
                TokenAccountOpts(program_id=Pubkey.from_string(program_id)),
                commitment=self._commitment,
            )
            for acct in value or []:
                mint = mint_from_token_account(acct)
                if mint:
                    mints.append(mint)
        return mints

    async def get_program_accounts(
        self, program_id: str, offset: int, match: str
    ) -> list[ProgramAccount]:
        try:
            program = Pubkey.from_string(program_id)
        except Exception as e:
            raise SignalFetchFailure("get_program_accounts", str(e)) from e
        value = await self._call(
            "get_program_accounts",
            program,
            commitment=self._commitment,
            encoding="base64",
            filters=[MemcmpOpts(offset=offset, bytes=match)],
        )
        accounts: list[ProgramAccount] = []
        for item in value or []:
            account = ProgramAccount.from_rpc_item(item)
            if account is not None:
                accounts.append(account)
        return accounts
