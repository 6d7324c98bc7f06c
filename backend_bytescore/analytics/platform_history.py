"""
Platform history: an account's repayment ratio on ByteBonds obligations.

Reads the ByteBonds program's Bond accounts owned by the freelancer (memcmp on
the freelancer field) and the Repayment accounts of each bond, decodes the
Anchor layouts and compares amounts repaid with amounts that have fallen due.

Accounts with no obligations, and any failure, get the neutral ratio so new
participants are neither rewarded nor penalized.
"""

from __future__ import annotations

import hashlib
import struct
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

from backend_bytescore.bytescore_logging import get_logger, short_wallet
from backend_bytescore.ledger.reader import LedgerReader

logger = get_logger(__name__)

DISCRIMINATOR_LEN = 8
PUBKEY_LEN = 32
# Bond.freelancer and Repayment.bond both sit right after the discriminator
OWNER_FIELD_OFFSET = DISCRIMINATOR_LEN
SECONDS_PER_MONTH = 30 * 86400


def account_discriminator(name: str) -> bytes:
    """Anchor account discriminator: first 8 bytes of sha256("account:<Name>")."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_LEN]


BOND_DISCRIMINATOR = account_discriminator("Bond")
REPAYMENT_DISCRIMINATOR = account_discriminator("Repayment")


class BondStatus(IntEnum):
    OPEN = 0
    FUNDED = 1
    REPAYING = 2
    COMPLETED = 3


class RepaymentStatus(IntEnum):
    PENDING = 0
    PAID = 1
    OVERDUE = 2


class RepaymentType(IntEnum):
    LUMP_SUM = 0
    INSTALLMENTS = 1


@dataclass(frozen=True)
class BondAccount:
    address: str
    freelancer: bytes
    amount: int
    duration_months: int
    interest_rate: int
    funded: int
    status: BondStatus
    created_at: int
    repayment_type: RepaymentType
    installments: int

    @property
    def total_owed(self) -> int:
        """Principal plus interest in lamports, integer math as on-chain."""
        return self.amount + self.amount * self.interest_rate // 100

    @property
    def maturity(self) -> int:
        return self.created_at + self.duration_months * SECONDS_PER_MONTH


@dataclass(frozen=True)
class RepaymentAccount:
    address: str
    bond: bytes
    amount: int
    due_date: int
    status: RepaymentStatus
    paid_at: int | None
    installment_number: int


@dataclass(frozen=True)
class RepaymentHistory:
    ratio: float
    obligations: int = 0
    amount_due: int = 0
    amount_repaid: int = 0


class _Cursor:
    """Sequential little-endian Borsh reader; struct.error on short data."""

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = data
        self._pos = offset

    def take(self, fmt: str) -> int:
        (value,) = struct.unpack_from(fmt, self._data, self._pos)
        self._pos += struct.calcsize(fmt)
        return value

    def pubkey(self) -> bytes:
        end = self._pos + PUBKEY_LEN
        if end > len(self._data):
            raise struct.error("pubkey past end of data")
        value = self._data[self._pos:end]
        self._pos = end
        return value

    def string(self) -> str:
        length = self.take("<I")
        end = self._pos + length
        if end > len(self._data):
            raise struct.error("string past end of data")
        value = self._data[self._pos:end].decode("utf-8", errors="replace")
        self._pos = end
        return value


def parse_bond_account(address: str, data: bytes) -> BondAccount | None:
    """Decode a Bond account; None if the discriminator or layout does not match."""
    if data[:DISCRIMINATOR_LEN] != BOND_DISCRIMINATOR:
        return None
    try:
        c = _Cursor(data, DISCRIMINATOR_LEN)
        freelancer = c.pubkey()
        amount = c.take("<Q")
        duration = c.take("<B")
        interest_rate = c.take("<B")
        funded = c.take("<Q")
        status = BondStatus(c.take("<B"))
        c.string()  # income_proof
        c.string()  # description
        created_at = c.take("<q")
        c.take("<Q")  # bond_seed
        c.take("<B")  # bump
        repayment_type = RepaymentType(c.take("<B"))
        installments = c.take("<B")
    except (struct.error, ValueError):
        return None
    return BondAccount(
        address=address,
        freelancer=freelancer,
        amount=amount,
        duration_months=duration,
        interest_rate=interest_rate,
        funded=funded,
        status=status,
        created_at=created_at,
        repayment_type=repayment_type,
        installments=installments,
    )


def parse_repayment_account(address: str, data: bytes) -> RepaymentAccount | None:
    """Decode a Repayment account; None if the discriminator or layout does not match."""
    if data[:DISCRIMINATOR_LEN] != REPAYMENT_DISCRIMINATOR:
        return None
    try:
        c = _Cursor(data, DISCRIMINATOR_LEN)
        bond = c.pubkey()
        c.pubkey()  # investor
        amount = c.take("<Q")
        due_date = c.take("<q")
        status = RepaymentStatus(c.take("<B"))
        c.take("<q")  # created_at
        paid_at = c.take("<q") if c.take("<B") == 1 else None
        installment_number = c.take("<B")
    except (struct.error, ValueError):
        return None
    return RepaymentAccount(
        address=address,
        bond=bond,
        amount=amount,
        due_date=due_date,
        status=status,
        paid_at=paid_at,
        installment_number=installment_number,
    )


def bond_obligation(
    bond: BondAccount, repayments: list[RepaymentAccount], now: float
) -> tuple[int, int] | None:
    """
    (amount_due, amount_repaid) in lamports for one bond, or None when the
    bond is not yet an obligation (still open for funding).
    """
    if bond.status == BondStatus.OPEN:
        return None
    if bond.status == BondStatus.COMPLETED:
        return bond.total_owed, bond.total_owed

    if repayments:
        due = repaid = 0
        for r in repayments:
            if r.status == RepaymentStatus.PAID:
                due += r.amount
                repaid += r.amount
            elif r.status == RepaymentStatus.OVERDUE or r.due_date <= now:
                due += r.amount
        return due, min(repaid, due)

    # Lump sum (or no plan yet): owed in full once the bond term has elapsed
    if bond.maturity <= now:
        return bond.total_owed, 0
    return 0, 0


class PlatformHistoryProvider(Protocol):
    async def repayment_history(self, wallet: str) -> RepaymentHistory:
        ...


class BondRepaymentHistory:
    """PlatformHistoryProvider backed by ByteBonds program accounts on-chain."""

    def __init__(
        self,
        reader: LedgerReader,
        program_id: str,
        neutral_ratio: float = 0.5,
        clock=time.time,
    ) -> None:
        self._reader = reader
        self._program_id = program_id
        self._neutral = neutral_ratio
        self._clock = clock

    async def _bonds(self, wallet: str) -> list[BondAccount]:
        accounts = await self._reader.get_program_accounts(self._program_id, OWNER_FIELD_OFFSET, wallet)
        bonds = [parse_bond_account(a.pubkey, a.data) for a in accounts]
        return [b for b in bonds if b is not None]

    async def _repayments(self, bond: BondAccount) -> list[RepaymentAccount]:
        accounts = await self._reader.get_program_accounts(self._program_id, OWNER_FIELD_OFFSET, bond.address)
        repayments = [parse_repayment_account(a.pubkey, a.data) for a in accounts]
        return [r for r in repayments if r is not None]

    async def repayment_history(self, wallet: str) -> RepaymentHistory:
        """Repaid / due across the wallet's bonds; neutral when none are due or on failure."""
        try:
            now = self._clock()
            obligations = 0
            total_due = total_repaid = 0
            for bond in await self._bonds(wallet):
                repayments = await self._repayments(bond) if bond.status != BondStatus.OPEN else []
                result = bond_obligation(bond, repayments, now)
                if result is None:
                    continue
                obligations += 1
                total_due += result[0]
                total_repaid += result[1]
        except Exception as e:
            logger.warning("platform_history_failed", wallet=short_wallet(wallet), error=str(e))
            return RepaymentHistory(ratio=self._neutral)

        if total_due <= 0:
            return RepaymentHistory(ratio=self._neutral, obligations=obligations)
        ratio = max(0.0, min(1.0, total_repaid / total_due))
        logger.debug(
            "platform_history_computed",
            wallet=short_wallet(wallet),
            obligations=obligations,
            amount_due=total_due,
            amount_repaid=total_repaid,
            ratio=round(ratio, 4),
        )
        return RepaymentHistory(
            ratio=ratio,
            obligations=obligations,
            amount_due=total_due,
            amount_repaid=total_repaid,
        )
