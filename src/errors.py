from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class TransactionErrorKind(Enum):
    UNKNOWN_ACCOUNT_OR_LOCKED = "unknown_account_or_locked"
    DUPLICATE_TX_ID = "duplicate_tx_id"
    MISSING_AMOUNT = "missing_amount"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DISPUTE_TARGET_NOT_FOUND = "dispute_target_not_found"
    DISPUTE_TARGET_NOT_DEPOSIT = "dispute_target_not_deposit"
    DISPUTE_ALREADY_ACTIVE_OR_RESOLVED = "dispute_already_active_or_resolved"
    NO_ACTIVE_DISPUTE = "no_active_dispute"
    CLIENT_MISMATCH = "client_mismatch"
    PRECISION_EXCEEDED = "precision_exceeded"


class IntegrityErrorKind(Enum):
    FUNDS_NOT_AVAILABLE = "funds_not_available"
    FUNDS_NOT_HELD = "funds_not_held"
    DISPUTED_TRANSACTION_MISSING = "disputed_transaction_missing"


@dataclass(frozen=True)
class TransactionError:
    """
    Problem with the input record itself.
    The record is rejected, state is left untouched and processing continues.
    """

    kind: TransactionErrorKind
    client_id: int
    transaction_id: int

    def __str__(self) -> str:
        return f"{self.kind.value} (client={self.client_id}, tx={self.transaction_id})"


@dataclass(frozen=True)
class IntegrityError:
    """
    Internal invariant violation, e.g. a balance about to go negative after every
    input check passed. Never expected; the run must stop when one is seen.
    """

    kind: IntegrityErrorKind
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.kind.value} ({details})"


class ProcessingAborted(Exception):
    """Raised by the engine when the processor reports an integrity fault."""

    def __init__(self, error: IntegrityError):
        super().__init__(f"integrity error during processing: {error}")
        self.error = error
