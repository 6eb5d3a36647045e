import dataclasses
from decimal import Decimal
from typing import Dict, Optional

from errors import InvalidStateTransition
from models import LEDGER_KINDS, DisputeState, LedgerEntry, TransactionType

ALLOWED_TRANSITIONS = {
    DisputeState.ACTIVE: {DisputeState.DISPUTED},
    DisputeState.DISPUTED: {DisputeState.ACTIVE, DisputeState.CHARGED_BACK},
    DisputeState.CHARGED_BACK: set(),
}


class Ledger:
    """
    Every accepted deposit and withdrawal, keyed by globally unique transaction id.
    Entries are never removed; only their dispute state changes.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, transaction_id: int, client_id: int, kind: TransactionType, amount: Decimal) -> bool:
        """
        Store a new ACTIVE entry.

        Returns False without touching the ledger if the id is already used.
        """
        if kind not in LEDGER_KINDS:
            raise ValueError(f"{kind.value} transactions are not recorded in the ledger")

        if transaction_id in self._entries:
            return False

        self._entries[transaction_id] = LedgerEntry(
            transaction_id=transaction_id,
            client_id=client_id,
            kind=kind,
            amount=amount,
        )
        return True

    def lookup(self, transaction_id: int) -> Optional[LedgerEntry]:
        """Retrieve stored entry by ID."""
        return self._entries.get(transaction_id)

    def set_state(self, transaction_id: int, new_state: DisputeState) -> LedgerEntry:
        entry = self._entries[transaction_id]
        if new_state not in ALLOWED_TRANSITIONS[entry.state]:
            raise InvalidStateTransition(
                f"tx {transaction_id}: cannot move from {entry.state.value} to {new_state.value}"
            )

        updated = dataclasses.replace(entry, state=new_state)
        self._entries[transaction_id] = updated
        return updated
