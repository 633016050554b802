import logging
from decimal import Decimal, Inexact
from typing import Optional, Tuple, Union

from errors import IntegrityError, IntegrityErrorKind, TransactionError, TransactionErrorKind
from models import ClientAccount, ProcessingOutcome, Transaction, TransactionType
from money import fits_precision
from state import DisputeRegistry, Ledger


class TransactionProcessor:
    """
    Applies records to the ledger one at a time.

    Every operation returns a ProcessingOutcome:
        APPLIED: state was updated
        REJECTED: bad input, state untouched, keep going
        FAULTED: an internal invariant broke, the caller must stop
    All checks run before any mutation, so a rejected record never leaves a partial update.
    """

    def __init__(
        self,
        ledger: Optional[Ledger] = None,
        disputes: Optional[DisputeRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._ledger = ledger if ledger is not None else Ledger()
        self._disputes = disputes if disputes is not None else DisputeRegistry()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def disputes(self) -> DisputeRegistry:
        return self._disputes

    def process_transaction(self, transaction: Transaction) -> ProcessingOutcome:
        client_id = transaction.client_id
        transaction_id = transaction.transaction_id

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self.deposit(client_id, transaction_id, transaction.amount)
            case TransactionType.WITHDRAWAL:
                return self.withdrawal(client_id, transaction_id, transaction.amount)
            case TransactionType.DISPUTE:
                return self.dispute(client_id, transaction_id)
            case TransactionType.RESOLVE:
                return self.resolve(client_id, transaction_id)
            case TransactionType.CHARGEBACK:
                return self.chargeback(client_id, transaction_id)
            case _:
                raise ValueError(f"unsupported transaction type {transaction.transaction_type!r}")

    def deposit(self, client_id: int, transaction_id: int, amount: Optional[Decimal]) -> ProcessingOutcome:
        account = self._ledger.get(client_id)
        if account is not None and account.locked:
            return self._reject(TransactionErrorKind.UNKNOWN_ACCOUNT_OR_LOCKED, client_id, transaction_id)

        error = self._check_new_transaction(transaction_id, amount)
        if error is not None:
            return self._reject(error, client_id, transaction_id)

        account = self._ledger.get_or_create(client_id)
        try:
            account.credit(amount)
        except Inexact:
            return self._reject(TransactionErrorKind.PRECISION_EXCEEDED, client_id, transaction_id)
        self._ledger.store_transaction(
            Transaction(TransactionType.DEPOSIT, client_id, transaction_id, amount)
        )
        return ProcessingOutcome.applied()

    def withdrawal(self, client_id: int, transaction_id: int, amount: Optional[Decimal]) -> ProcessingOutcome:
        account = self._open_account(client_id)
        if account is None:
            return self._reject(TransactionErrorKind.UNKNOWN_ACCOUNT_OR_LOCKED, client_id, transaction_id)

        error = self._check_new_transaction(transaction_id, amount)
        if error is not None:
            return self._reject(error, client_id, transaction_id)

        if account.available < amount:
            return self._reject(TransactionErrorKind.INSUFFICIENT_FUNDS, client_id, transaction_id)

        try:
            account.debit(amount)
        except Inexact:
            return self._reject(TransactionErrorKind.PRECISION_EXCEEDED, client_id, transaction_id)
        self._ledger.store_transaction(
            Transaction(TransactionType.WITHDRAWAL, client_id, transaction_id, amount)
        )
        return ProcessingOutcome.applied()

    def dispute(self, client_id: int, transaction_id: int) -> ProcessingOutcome:
        account = self._open_account(client_id)
        if account is None:
            return self._reject(TransactionErrorKind.UNKNOWN_ACCOUNT_OR_LOCKED, client_id, transaction_id)

        original = self._ledger.get_transaction(transaction_id)
        if original is None:
            return self._reject(TransactionErrorKind.DISPUTE_TARGET_NOT_FOUND, client_id, transaction_id)

        # Withdrawn funds already left the account, there is nothing to hold
        if original.transaction_type != TransactionType.DEPOSIT:
            return self._reject(TransactionErrorKind.DISPUTE_TARGET_NOT_DEPOSIT, client_id, transaction_id)

        if original.client_id != client_id:
            return self._reject(TransactionErrorKind.CLIENT_MISMATCH, client_id, transaction_id)

        if self._disputes.has_dispute(transaction_id):
            return self._reject(
                TransactionErrorKind.DISPUTE_ALREADY_ACTIVE_OR_RESOLVED, client_id, transaction_id
            )

        if account.available < original.amount:
            return self._fault(
                IntegrityErrorKind.FUNDS_NOT_AVAILABLE,
                client=client_id,
                tx=transaction_id,
                available=account.available,
                required=original.amount,
            )

        try:
            account.hold(original.amount)
        except Inexact:
            return self._reject(TransactionErrorKind.PRECISION_EXCEEDED, client_id, transaction_id)
        self._disputes.open(transaction_id)
        return ProcessingOutcome.applied()

    def resolve(self, client_id: int, transaction_id: int) -> ProcessingOutcome:
        checked = self._check_active_dispute(client_id, transaction_id)
        if isinstance(checked, ProcessingOutcome):
            return checked
        account, original = checked

        try:
            account.release_hold(original.amount)
        except Inexact:
            return self._reject(TransactionErrorKind.PRECISION_EXCEEDED, client_id, transaction_id)
        self._disputes.resolve(transaction_id)
        return ProcessingOutcome.applied()

    def chargeback(self, client_id: int, transaction_id: int) -> ProcessingOutcome:
        checked = self._check_active_dispute(client_id, transaction_id)
        if isinstance(checked, ProcessingOutcome):
            return checked
        account, original = checked

        try:
            account.charge_back(original.amount)
        except Inexact:
            return self._reject(TransactionErrorKind.PRECISION_EXCEEDED, client_id, transaction_id)
        self._disputes.charge_back(transaction_id)
        self._logger.info(f"Chargeback tx {transaction_id}: account {client_id} locked")
        return ProcessingOutcome.applied()

    def _open_account(self, client_id: int) -> Optional[ClientAccount]:
        """Known, unlocked account or None."""
        account = self._ledger.get(client_id)
        if account is None or account.locked:
            return None
        return account

    def _check_new_transaction(
        self, transaction_id: int, amount: Optional[Decimal]
    ) -> Optional[TransactionErrorKind]:
        """Checks shared by deposits and withdrawals."""
        if self._ledger.has_transaction(transaction_id):
            return TransactionErrorKind.DUPLICATE_TX_ID
        if amount is None:
            return TransactionErrorKind.MISSING_AMOUNT
        if amount <= 0:
            return TransactionErrorKind.INVALID_AMOUNT
        if not fits_precision(amount):
            return TransactionErrorKind.PRECISION_EXCEEDED
        return None

    def _check_active_dispute(
        self, client_id: int, transaction_id: int
    ) -> Union[ProcessingOutcome, Tuple[ClientAccount, Transaction]]:
        """
        Shared checks for resolve and chargeback.
        Returns the account and disputed deposit, or the outcome to report instead.
        """
        account = self._open_account(client_id)
        if account is None:
            return self._reject(TransactionErrorKind.UNKNOWN_ACCOUNT_OR_LOCKED, client_id, transaction_id)

        if not self._disputes.is_active(transaction_id):
            return self._reject(TransactionErrorKind.NO_ACTIVE_DISPUTE, client_id, transaction_id)

        original = self._ledger.get_transaction(transaction_id)
        if original is None:
            return self._fault(
                IntegrityErrorKind.DISPUTED_TRANSACTION_MISSING, client=client_id, tx=transaction_id
            )

        if original.client_id != client_id:
            return self._reject(TransactionErrorKind.CLIENT_MISMATCH, client_id, transaction_id)

        if account.held < original.amount:
            return self._fault(
                IntegrityErrorKind.FUNDS_NOT_HELD,
                client=client_id,
                tx=transaction_id,
                held=account.held,
                required=original.amount,
            )

        return account, original

    def _reject(self, kind: TransactionErrorKind, client_id: int, transaction_id: int) -> ProcessingOutcome:
        error = TransactionError(kind, client_id, transaction_id)
        self._logger.warning(f"Rejected transaction: {error}")
        return ProcessingOutcome.rejected(error)

    def _fault(self, kind: IntegrityErrorKind, **context) -> ProcessingOutcome:
        error = IntegrityError(kind, context)
        self._logger.error(f"Integrity error: {error}")
        return ProcessingOutcome.faulted(error)
