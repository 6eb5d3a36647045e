import logging
from typing import Dict, Iterable

from accounts import AccountStore
from csv_reader import read_transactions
from ledger import Ledger
from models import ClientAccount, ProcessingStats, Transaction
from processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a stream of transactions, strictly in order, against a fresh
    ledger and account store.
    """

    def __init__(self, freeze_locked_accounts: bool = False):
        self.ledger = Ledger()
        self.accounts = AccountStore()
        self.stats = ProcessingStats()
        self._processor = TransactionProcessor(
            self.ledger, self.accounts, freeze_locked_accounts=freeze_locked_accounts
        )

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply each transaction before pulling the next one; return final account states."""
        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self.stats.record(result)

        logger.info(self.stats.summary())
        return {account.client_id: account for account in self.accounts}

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states. Raises InputError on bad input."""
        logger.info(f"Processing {filepath}")
        return self.process(read_transactions(filepath))
