import sys
import os
from decimal import Decimal, Inexact

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import IntegrityError, IntegrityErrorKind, TransactionError, TransactionErrorKind
from models import ClientAccount, ProcessingOutcome, ProcessingResult, ProcessingStats, Transaction, TransactionType


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_total_follows_every_mutation(self):
        account = ClientAccount(client_id=1)
        account.credit(Decimal("10.5"))
        account.hold(Decimal("4.25"))
        assert (account.available, account.held, account.total) == (Decimal("6.25"), Decimal("4.25"), Decimal("10.5"))

        account.release_hold(Decimal("1.25"))
        assert account.total == account.available + account.held == Decimal("10.5")

        account.charge_back(Decimal("3"))
        assert account.held == Decimal("0")
        assert account.total == Decimal("7.5")
        assert account.locked is True

    def test_snapshot_is_detached(self):
        account = ClientAccount(client_id=7, available=Decimal("1"))
        snapshot = account.snapshot()
        account.credit(Decimal("1"))

        assert snapshot.client_id == 7
        assert snapshot.available == Decimal("1")
        assert snapshot.total == Decimal("1")


class TestProcessingOutcome:
    def test_enum_values(self):
        assert ProcessingResult.APPLIED.value == "applied"
        assert ProcessingResult.REJECTED.value == "rejected"
        assert ProcessingResult.FAULTED.value == "faulted"

    def test_variants(self):
        rejection = TransactionError(TransactionErrorKind.DUPLICATE_TX_ID, 1, 2)
        fault = IntegrityError(IntegrityErrorKind.FUNDS_NOT_HELD, {"tx": 2})

        assert ProcessingOutcome.applied().is_applied
        assert ProcessingOutcome.applied().error is None
        assert ProcessingOutcome.rejected(rejection).result == ProcessingResult.REJECTED
        assert ProcessingOutcome.rejected(rejection).error is rejection
        assert ProcessingOutcome.faulted(fault).result == ProcessingResult.FAULTED
        assert not ProcessingOutcome.faulted(fault).is_applied


class TestErrors:
    def test_transaction_error_carries_correlation_key(self):
        error = TransactionError(TransactionErrorKind.INSUFFICIENT_FUNDS, client_id=3, transaction_id=9)
        assert str(error) == "insufficient_funds (client=3, tx=9)"

    def test_integrity_error_renders_context(self):
        error = IntegrityError(IntegrityErrorKind.FUNDS_NOT_AVAILABLE, {"client": 1, "tx": 2})
        assert str(error) == "funds_not_available (client=1, tx=2)"


class TestProcessingStats:
    def test_counters(self):
        stats = ProcessingStats()
        stats.record_applied()
        stats.record_applied()
        stats.record_rejected()
        stats.record_skipped()
        assert str(stats) == "Applied: 2, Rejected: 1, Skipped: 1"


class TestExactBalances:
    def test_mutation_that_would_round_leaves_account_untouched(self):
        account = ClientAccount(client_id=1, available=Decimal("9999999999999999999999999999"))

        with pytest.raises(Inexact):
            account.hold(Decimal("0.1"))
        with pytest.raises(Inexact):
            account.credit(Decimal("0.1"))

        assert account.available == Decimal("9999999999999999999999999999")
        assert account.held == Decimal("0")
