import logging
import os
import sys

from engine import PaymentsEngine
from errors import InputError
from report import write_accounts

LOG_LEVEL_ENV = "PAYMENTS_ENGINE_LOG_LEVEL"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return 2

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(argv[0])
    except InputError as e:
        logger.error(f"Aborting: {e}")
        return 1

    write_accounts(accounts.values())
    return 0


def run() -> None:
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
