import logging
from decimal import localcontext
from typing import Optional, Tuple

from accounts import AccountStore
from ledger import Ledger
from models import (
    APPLIED,
    EXACT_CONTEXT,
    ClientAccount,
    DisputeState,
    LedgerEntry,
    ProcessingResult,
    RejectReason,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to a ledger and an account store, one at a time.

    Illegal transactions are never raised: they leave balances and ledger
    untouched and come back as a rejected ProcessingResult.
    """

    def __init__(self, ledger: Ledger, accounts: AccountStore, freeze_locked_accounts: bool = False):
        self._ledger = ledger
        self._accounts = accounts
        self.freeze_locked_accounts = freeze_locked_accounts

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        The client's account is created first, so every client seen in the
        input ends up with a row even if all of its transactions are rejected.
        """
        account = self._accounts.get_or_create(transaction.client_id)

        if account.locked and self.freeze_locked_accounts:
            logger.info(f"{transaction}: account {account.client_id} is locked")
            return ProcessingResult.rejected(RejectReason.ACCOUNT_LOCKED)

        with localcontext(EXACT_CONTEXT):
            return self._dispatch(account, transaction)

    def _dispatch(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

        raise ValueError(f"Unknown transaction type: {transaction.transaction_type}")

    def _check_new_entry(self, transaction: Transaction) -> Optional[ProcessingResult]:
        if transaction.amount is None or transaction.amount <= 0:
            logger.info(f"{transaction}: invalid amount {transaction.amount}")
            return ProcessingResult.rejected(RejectReason.INVALID_AMOUNT)

        if transaction.transaction_id in self._ledger:
            logger.info(f"{transaction}: transaction id already used, skipping")
            return ProcessingResult.rejected(RejectReason.DUPLICATE_TRANSACTION)

        return None

    def _find_entry(
        self, transaction: Transaction, expected_state: DisputeState
    ) -> Tuple[Optional[LedgerEntry], Optional[ProcessingResult]]:
        """Look up the entry a dispute/resolve/chargeback refers to and check its state."""
        entry = self._ledger.lookup(transaction.transaction_id)

        if entry is None:
            logger.info(f"{transaction}: referenced transaction not found")
            return None, ProcessingResult.rejected(RejectReason.TRANSACTION_NOT_FOUND)

        if entry.client_id != transaction.client_id:
            logger.warning(
                f"{transaction}: client mismatch (transaction belongs to client {entry.client_id})"
            )
            return None, ProcessingResult.rejected(RejectReason.CLIENT_MISMATCH)

        if entry.state is not expected_state:
            logger.info(f"{transaction}: transaction is {entry.state.value}, expected {expected_state.value}")
            return None, ProcessingResult.rejected(RejectReason.INVALID_DISPUTE_STATE)

        return entry, None

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_new_entry(transaction)
        if rejection is not None:
            return rejection

        account.available += transaction.amount
        self._ledger.record(transaction.transaction_id, account.client_id, TransactionType.DEPOSIT, transaction.amount)
        return APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_new_entry(transaction)
        if rejection is not None:
            return rejection

        if account.available < transaction.amount:
            logger.info(f"{transaction}: insufficient funds (available {account.available})")
            return ProcessingResult.rejected(RejectReason.INSUFFICIENT_FUNDS)

        account.available -= transaction.amount
        self._ledger.record(transaction.transaction_id, account.client_id, TransactionType.WITHDRAWAL, transaction.amount)
        return APPLIED

    # Withdrawals are disputed with the same arithmetic as deposits, which may
    # leave available negative.
    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry, rejection = self._find_entry(transaction, DisputeState.ACTIVE)
        if rejection is not None:
            return rejection

        account.available -= entry.amount
        account.held += entry.amount
        self._ledger.set_state(entry.transaction_id, DisputeState.DISPUTED)
        return APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry, rejection = self._find_entry(transaction, DisputeState.DISPUTED)
        if rejection is not None:
            return rejection

        account.held -= entry.amount
        account.available += entry.amount
        self._ledger.set_state(entry.transaction_id, DisputeState.ACTIVE)
        return APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry, rejection = self._find_entry(transaction, DisputeState.DISPUTED)
        if rejection is not None:
            return rejection

        account.held -= entry.amount
        account.locked = True
        self._ledger.set_state(entry.transaction_id, DisputeState.CHARGED_BACK)
        return APPLIED
