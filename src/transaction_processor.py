import logging
from decimal import localcontext

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, LEDGER_CONTEXT
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to state, one at a time, in input order.
    Invalid transactions are dropped without touching state and reported as REJECTED;
    nothing here raises for a business-rule violation.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Balances and dispute state were updated
            REJECTED: Transaction was invalid and ignored (duplicate id, insufficient funds,
                unknown client or transaction, wrong dispute state, locked account)
        """
        with localcontext(LEDGER_CONTEXT):
            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    return self._handle_deposit(transaction)
                case TransactionType.WITHDRAWAL:
                    return self._handle_withdrawal(transaction)
                case TransactionType.DISPUTE:
                    return self._handle_dispute(transaction)
                case TransactionType.RESOLVE:
                    return self._handle_resolve(transaction)
                case TransactionType.CHARGEBACK:
                    return self._handle_chargeback(transaction)

    def _reject(self, transaction: Transaction, reason: str) -> ProcessingResult:
        logger.debug(f"Rejected {transaction}: {reason}")
        return ProcessingResult.REJECTED

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if self._state.has_transaction(transaction.transaction_id):
            return self._reject(transaction, "transaction id already used")

        account = self._state.get_or_create_account(transaction.client_id)
        if account.locked:
            return self._reject(transaction, "account locked")

        account.credit(transaction.amount)
        self._state.store_transaction(transaction)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if self._state.has_transaction(transaction.transaction_id):
            return self._reject(transaction, "transaction id already used")

        account = self._state.get_account(transaction.client_id)
        if account is None:
            return self._reject(transaction, "unknown client")

        if account.locked:
            return self._reject(transaction, "account locked")

        if account.available < transaction.amount:
            return self._reject(transaction, f"insufficient funds (available {account.available})")

        account.debit(transaction.amount)
        self._state.store_transaction(transaction)
        return ProcessingResult.SUCCESS

    def _find_disputable(self, transaction: Transaction, want_disputed: bool):
        """
        Look up the stored transaction a dispute, resolve or chargeback refers to,
        along with its owning account. Returns (None, reason) when the reference is invalid.
        """
        original = self._state.get_transaction(transaction.transaction_id)
        if original is None:
            return None, "referenced transaction not found"

        if original.client_id != transaction.client_id:
            return None, f"client mismatch (owned by client {original.client_id})"

        if original.disputed != want_disputed:
            return None, "already disputed" if original.disputed else "not disputed"

        if original.transaction_type != TransactionType.DEPOSIT:
            return None, f"only deposits can be disputed (got {original.transaction_type.value})"

        account = self._state.get_account(original.client_id)
        if account.locked:
            return None, "account locked"

        return (original, account), None

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        found, reason = self._find_disputable(transaction, want_disputed=False)
        if found is None:
            return self._reject(transaction, reason)

        original, account = found
        account.hold(original.amount)
        original.disputed = True
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        found, reason = self._find_disputable(transaction, want_disputed=True)
        if found is None:
            return self._reject(transaction, reason)

        original, account = found
        account.release_hold(original.amount)
        original.disputed = False
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        found, reason = self._find_disputable(transaction, want_disputed=True)
        if found is None:
            return self._reject(transaction, reason)

        original, account = found
        account.charge_back(original.amount)
        return ProcessingResult.SUCCESS


def apply_transaction(state: StateManager, transaction: Transaction) -> StateManager:
    """Fold step: apply one transaction to state and return the same state."""
    TransactionProcessor(state).process_transaction(transaction)
    return state
