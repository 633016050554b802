from typing import Dict, List, Optional

from models import AccountSnapshot, ClientAccount, DisputeState, Transaction


class Ledger:
    """
    Client accounts plus the history of applied deposits and withdrawals.
    Owned by a single processor for the whole run, so no locking.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account if the client is known."""
        return self._accounts.get(client_id)

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create a zeroed one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def snapshot(self) -> List[AccountSnapshot]:
        """Read-only account views ordered by client id."""
        return [self._accounts[client_id].snapshot() for client_id in sorted(self._accounts)]


class DisputeRegistry:
    """
    Dispute state per transaction id.
    ACTIVE is the only state that can move; RESOLVED and CHARGED_BACK are final.
    """

    def __init__(self):
        self._states: Dict[int, DisputeState] = {}

    def get_state(self, transaction_id: int) -> Optional[DisputeState]:
        return self._states.get(transaction_id)

    def has_dispute(self, transaction_id: int) -> bool:
        return transaction_id in self._states

    def is_active(self, transaction_id: int) -> bool:
        return self._states.get(transaction_id) == DisputeState.ACTIVE

    def open(self, transaction_id: int) -> None:
        if transaction_id in self._states:
            raise ValueError(f"tx {transaction_id} already has a dispute ({self._states[transaction_id].value})")
        self._states[transaction_id] = DisputeState.ACTIVE

    def resolve(self, transaction_id: int) -> None:
        self._close(transaction_id, DisputeState.RESOLVED)

    def charge_back(self, transaction_id: int) -> None:
        self._close(transaction_id, DisputeState.CHARGED_BACK)

    def _close(self, transaction_id: int, final_state: DisputeState) -> None:
        if not self.is_active(transaction_id):
            raise ValueError(f"tx {transaction_id} has no active dispute")
        self._states[transaction_id] = final_state
