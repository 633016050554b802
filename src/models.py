from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from errors import IntegrityError, TransactionError
import money
from money import ZERO


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    FAULTED = "faulted"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class ProcessingOutcome:
    """
    Result of applying one record.
    APPLIED carries no error, REJECTED carries a TransactionError, FAULTED an IntegrityError.
    """

    result: ProcessingResult
    error: Optional[Union[TransactionError, IntegrityError]] = None

    @classmethod
    def applied(cls) -> "ProcessingOutcome":
        return cls(ProcessingResult.APPLIED)

    @classmethod
    def rejected(cls, error: TransactionError) -> "ProcessingOutcome":
        return cls(ProcessingResult.REJECTED, error)

    @classmethod
    def faulted(cls, error: IntegrityError) -> "ProcessingOutcome":
        return cls(ProcessingResult.FAULTED, error)

    @property
    def is_applied(self) -> bool:
        return self.result == ProcessingResult.APPLIED


@dataclass
class ClientAccount:
    """
    Balances of one client. Every mutation runs in the exact money context and
    raises decimal.Inexact, leaving the account untouched, if a result can't be
    represented without rounding.
    """

    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return money.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self._set(money.add(self.available, amount), self.held)

    def debit(self, amount: Decimal) -> None:
        self._set(money.subtract(self.available, amount), self.held)

    def hold(self, amount: Decimal) -> None:
        self._set(money.subtract(self.available, amount), money.add(self.held, amount))

    def release_hold(self, amount: Decimal) -> None:
        self._set(money.add(self.available, amount), money.subtract(self.held, amount))

    def charge_back(self, amount: Decimal) -> None:
        self._set(self.available, money.subtract(self.held, amount))
        self.locked = True

    def _set(self, available: Decimal, held: Decimal) -> None:
        # total must stay representable too
        money.add(available, held)
        self.available = available
        self.held = held

    def snapshot(self) -> "AccountSnapshot":
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            locked=self.locked,
        )


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account for reporting."""

    client_id: int
    available: Decimal
    held: Decimal
    locked: bool

    @property
    def total(self) -> Decimal:
        return money.add(self.available, self.held)


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.skipped = 0

    def record_applied(self):
        self.applied += 1

    def record_rejected(self):
        self.rejected += 1

    def record_skipped(self):
        self.skipped += 1

    def __str__(self) -> str:
        return f"Applied: {self.applied}, Rejected: {self.rejected}, Skipped: {self.skipped}"
