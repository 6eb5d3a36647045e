import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, List, Optional

from errors import InputError
from models import AMOUNT_PLACES, LEDGER_KINDS, MAX_CLIENT_ID, MAX_TRANSACTION_ID, Transaction, TransactionType

logger = logging.getLogger(__name__)

HEADER = ["type", "client", "tx", "amount"]


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """
    Lazily read transactions from a CSV file, in file order.

    Any record that cannot be decoded raises InputError; nothing is skipped.
    """
    reader = None
    try:
        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            yield from parse_rows(reader, line_number=lambda: reader.line_num)
    except OSError as e:
        raise InputError(f"cannot read {filepath}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise InputError(f"{filepath} is not valid UTF-8: {e}") from e
    except csv.Error as e:
        raise InputError(f"malformed CSV: {e}", line=reader.line_num if reader else None) from e


def parse_rows(rows: Iterable[List[str]], line_number=None) -> Iterator[Transaction]:
    """Parse raw CSV rows (header first) into transactions."""
    header_seen = False
    for index, row in enumerate(rows, start=1):
        line = line_number() if line_number else index
        fields = [field.strip() for field in row]
        if not any(fields):
            continue

        if not header_seen:
            _check_header(fields, line)
            header_seen = True
            continue

        yield parse_row(fields, line)


def _check_header(fields: List[str], line: int) -> None:
    names = [name.lower() for name in fields]
    if names != HEADER and names != HEADER[:3]:
        raise InputError(f"unexpected header {fields!r}, expected {', '.join(HEADER)}", line=line)


def parse_row(fields: List[str], line: Optional[int] = None) -> Transaction:
    """Parse one stripped CSV record into a Transaction."""
    if len(fields) not in (3, 4):
        raise InputError(f"expected 3 or 4 fields, got {len(fields)}: {fields!r}", line=line)

    try:
        transaction_type = TransactionType(fields[0].lower())
    except ValueError:
        raise InputError(f"unknown transaction type {fields[0]!r}", line=line) from None

    client_id = _parse_id(fields[1], "client", MAX_CLIENT_ID, line)
    transaction_id = _parse_id(fields[2], "tx", MAX_TRANSACTION_ID, line)

    amount_str = fields[3] if len(fields) == 4 else ""
    amount = None
    if transaction_type in LEDGER_KINDS:
        if not amount_str:
            raise InputError(f"{transaction_type.value} requires an amount", line=line)
        amount = _parse_amount(amount_str, line)
    elif amount_str:
        logger.debug(f"line {line}: ignoring amount on {transaction_type.value}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, name: str, maximum: int, line: Optional[int]) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise InputError(f"{name} must be an integer, got {value!r}", line=line) from None

    if not 0 <= parsed <= maximum:
        raise InputError(f"{name} {parsed} out of range 0..{maximum}", line=line)
    return parsed


def _fractional_digits(amount: Decimal) -> int:
    """Count fractional digits without rounding, ignoring trailing zeros."""
    _, digits, exponent = amount.as_tuple()
    while exponent < 0 and digits and digits[-1] == 0:
        digits = digits[:-1]
        exponent += 1
    return max(0, -exponent)


def _parse_amount(value: str, line: Optional[int]) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise InputError(f"invalid amount {value!r}", line=line) from None

    if not amount.is_finite() or _fractional_digits(amount) > AMOUNT_PLACES:
        raise InputError(
            f"amount must be a decimal with at most {AMOUNT_PLACES} fractional digits, got {value!r}",
            line=line,
        )
    return amount
