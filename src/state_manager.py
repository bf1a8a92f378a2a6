from typing import Dict, Optional

from models import Transaction, ClientAccount


class StateManager:
    """
    Engine state: client accounts and stored deposits/withdrawals for dispute lookups.
    Only TransactionProcessor mutates it.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an existing account, or None if the client has never deposited."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups. Existing ids are never overwritten."""
        self._transactions.setdefault(transaction.transaction_id, transaction)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
