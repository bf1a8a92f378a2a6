import logging
import os
import sys
from typing import List, Optional

from output import write_accounts
from payments_engine import PaymentsEngine, TransactionFileError

DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging() -> None:
    level_name = os.getenv("PAYMENTS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return 1

    configure_logging()

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except TransactionFileError as e:
        print(f"Failed to process '{filepath}': {e}", file=sys.stderr)
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
