from collections import Counter
from dataclasses import dataclass, field
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, localcontext
from enum import Enum
from typing import Optional

MAX_CLIENT_ID = 0xFFFF
MAX_TRANSACTION_ID = 0xFFFFFFFF
AMOUNT_PLACES = 4

# Balances only ever add and subtract input amounts, which is exact under this context.
EXACT_CONTEXT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


# Only these kinds create ledger entries; the rest reference one.
LEDGER_KINDS = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})


class DisputeState(Enum):
    ACTIVE = "active"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class RejectReason(Enum):
    INVALID_AMOUNT = "invalid_amount"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    CLIENT_MISMATCH = "client_mismatch"
    INVALID_DISPUTE_STATE = "invalid_dispute_state"
    ACCOUNT_LOCKED = "account_locked"


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of applying one transaction: applied, or rejected with a reason."""

    reason: Optional[RejectReason] = None

    @property
    def applied(self) -> bool:
        return self.reason is None

    @classmethod
    def rejected(cls, reason: RejectReason) -> "ProcessingResult":
        return cls(reason=reason)

    def __repr__(self) -> str:
        if self.applied:
            return "ProcessingResult(applied)"
        return f"ProcessingResult(rejected={self.reason.value})"


APPLIED = ProcessingResult()


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class LedgerEntry:
    transaction_id: int
    client_id: int
    kind: TransactionType
    amount: Decimal
    state: DisputeState = DisputeState.ACTIVE


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        with localcontext(EXACT_CONTEXT):
            return self.available + self.held


@dataclass
class ProcessingStats:
    """Counters for tracking processing statistics over one run."""

    applied: int = 0
    rejected: Counter = field(default_factory=Counter)

    def record(self, result: ProcessingResult) -> None:
        if result.applied:
            self.applied += 1
        else:
            self.rejected[result.reason] += 1

    @property
    def total_rejected(self) -> int:
        return sum(self.rejected.values())

    def summary(self) -> str:
        details = ", ".join(
            f"{reason.value}={count}"
            for reason, count in sorted(self.rejected.items(), key=lambda item: item[0].value)
        )
        line = f"Applied: {self.applied}, Rejected: {self.total_rejected}"
        return f"{line} ({details})" if details else line
