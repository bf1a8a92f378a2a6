import csv
import logging
import re
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional

from models import Transaction, TransactionType, ClientAccount, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx", "amount")
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
AMOUNT_PATTERN = re.compile(r"\d+(\.\d*)?|\.\d+")


class TransactionFileError(Exception):
    """Input file could not be read or contains a malformed row. Fatal for the whole run."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class PaymentsEngine:
    """
    Reads a CSV of transactions and applies them in file order.
    Business-rule rejections are absorbed by the processor; parse errors abort the run.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        accounts = self.process_transactions(self._read_transactions(filepath))
        logger.info(f"Processed: {self._stats.processed}, Rejected: {self._stats.rejected}")
        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            self._stats.record(self._processor.process_transaction(transaction))
        return self._state.get_all_accounts()

    def _read_transactions(self, filepath: str) -> Iterator[Transaction]:
        """Read CSV and yield transactions in file order."""
        try:
            with open(filepath, "r", newline="") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames is None:
                    raise TransactionFileError("missing header row")
                reader.fieldnames = [name.strip() for name in reader.fieldnames]

                missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
                if missing:
                    raise TransactionFileError(f"header is missing column(s): {', '.join(missing)}", reader.line_num)

                for row in reader:
                    try:
                        transaction = parse_csv_row(row)
                    except ValueError as e:
                        raise TransactionFileError(str(e), reader.line_num) from e
                    yield transaction
        except (csv.Error, UnicodeDecodeError) as e:
            raise TransactionFileError(f"malformed CSV: {e}") from e
        except OSError as e:
            raise TransactionFileError(str(e)) from e


def parse_csv_row(row: Dict[Optional[str], str]) -> Transaction:
    """
    Parse CSV row into Transaction.
    Raises ValueError if any field is malformed.
    """
    if None in row:
        raise ValueError(f"too many fields: {row[None]!r}")

    normalized = {k: (v or "").strip() for k, v in row.items()}

    transaction_type = TransactionType(normalized["type"])
    client_id = _parse_unsigned(normalized["client"], "client", MAX_CLIENT_ID)
    transaction_id = _parse_unsigned(normalized["tx"], "tx", MAX_TRANSACTION_ID)

    amount = None
    if transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
        amount = _parse_amount(normalized.get("amount", ""))

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_unsigned(value: str, field: str, maximum: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{field} must be an unsigned integer, got {value!r}")
    number = int(value)
    if number > maximum:
        raise ValueError(f"{field} {number} out of range (max {maximum})")
    return number


def _parse_amount(value: str) -> Decimal:
    if not value:
        raise ValueError("amount is required for deposits and withdrawals")
    if not (value.isascii() and AMOUNT_PATTERN.fullmatch(value)):
        raise ValueError(f"amount must be a non-negative decimal number, got {value!r}")
    return Decimal(value)
