import csv
import logging
import sys
from typing import Dict, Iterable, Iterator, List, Optional

from config import EngineConfig
from errors import ProcessingAborted
from models import AccountSnapshot, ClientAccount, ProcessingResult, ProcessingStats, Transaction, TransactionType
from money import parse_amount
from processor import TransactionProcessor


class PaymentsEngine:
    """
    Feeds records to the processor strictly in input order.
    Rejected records are counted and skipped; an integrity fault stops the run with ProcessingAborted.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        logger: Optional[logging.Logger] = None,
        processor: Optional[TransactionProcessor] = None,
    ):
        self._config = config or EngineConfig()
        self._logger = logger or logging.getLogger(__name__)
        self._processor = processor or TransactionProcessor(logger=self._logger)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        self._logger.info(f"Processing {filepath}")
        accounts = self.process_transactions(self.read_transactions(filepath))
        self._logger.info(f"Finished {filepath}")

        if self._config.report_stats:
            print(str(self._stats), file=sys.stderr)
        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            outcome = self._processor.process_transaction(transaction)

            if outcome.is_applied:
                self._stats.record_applied()
            elif outcome.result == ProcessingResult.REJECTED:
                self._stats.record_rejected()
            elif outcome.result == ProcessingResult.FAULTED:
                raise ProcessingAborted(outcome.error)

        return self._processor.ledger.get_all_accounts()

    def snapshot(self) -> List[AccountSnapshot]:
        return self._processor.ledger.snapshot()

    def read_transactions(self, filepath: str) -> Iterator[Transaction]:
        """Read CSV lazily, skipping rows that can't be parsed."""
        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f, skipinitialspace=True)
            for row in reader:
                transaction = self.parse_csv_row(row)
                if transaction is None:
                    self._stats.record_skipped()
                    continue
                yield transaction

    def parse_csv_row(self, row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            normalized = {
                k.strip(): v.strip()
                for k, v in row.items()
                if isinstance(k, str) and isinstance(v, str)
            }

            transaction_type = TransactionType(normalized["type"].lower())
            client_id = int(normalized["client"])
            transaction_id = int(normalized["tx"])
            if client_id < 0 or transaction_id < 0:
                raise ValueError("client and tx must be non-negative")

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = parse_amount(amount_str)

            return Transaction(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError) as e:
            self._logger.warning(f"Failed to parse row {row}: {e}")
            return None
