import sys
from decimal import Decimal, localcontext
from typing import Iterable, Optional, TextIO

from models import AMOUNT_PLACES, EXACT_CONTEXT, ClientAccount

HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    with localcontext(EXACT_CONTEXT):
        return f"{value:.{AMOUNT_PLACES}f}"


def format_account(account: ClientAccount) -> str:
    return (
        f"{account.client_id},"
        f"{format_decimal(account.available)},"
        f"{format_decimal(account.held)},"
        f"{format_decimal(account.total)},"
        f"{str(account.locked).lower()}"
    )


def write_accounts(accounts: Iterable[ClientAccount], stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    print(HEADER, file=stream)
    for account in accounts:
        print(format_account(account), file=stream)
