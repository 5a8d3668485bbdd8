"""Parsing of the CSV transaction log."""

import csv
from decimal import Decimal, InvalidOperation
from typing import TextIO

from ledger.models.exceptions import AmountOverflowError, InvalidInputError, InvalidRowError
from ledger.models.transaction import Transaction, TransactionType, quantize

REQUIRED_COLUMNS = ("type", "client", "tx")
OPTIONAL_COLUMNS = ("amount",)

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295

# What a text stream opened with errors='replace' puts in place of bytes that are not UTF-8
REPLACEMENT_CHARACTER = "\ufffd"


class RowReader:
    """
    Iterator over the rows of a CSV transaction log, keyed by column name.

    Header names are matched case-insensitively and regardless of
    surrounding whitespace, so the columns may come in any order. Rows
    shorter than the header yield empty strings for the missing fields.

    A record the csv module cannot split, or one holding bytes that were not
    valid UTF-8, raises InvalidRowError from __next__. Iteration can resume
    after it with the next record.
    """

    def __init__(self, stream: TextIO):
        """
        Read the header row.

        Args:
            stream: An open text stream positioned at the header row

        Raises:
            InvalidInputError: If the header is missing or lacks a required column
        """
        self._reader = csv.reader(stream)
        try:
            header = next(self._reader)
        except StopIteration:
            raise InvalidInputError("Input is empty, expected a header row")

        columns = {name.strip().lower(): index for index, name in enumerate(header)}
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise InvalidInputError(f"Header is missing required columns: {', '.join(missing)}")

        self._wanted = {
            name: columns[name] for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS if name in columns
        }

    def __iter__(self) -> "RowReader":
        return self

    def __next__(self) -> tuple[int, dict[str, str]]:
        """
        Return the next non-blank row.

        Returns:
            Tuple of (line number, row) where row maps column name to raw value

        Raises:
            InvalidRowError: If the record is unreadable; the reader stays usable
        """
        while True:
            try:
                record = next(self._reader)
            except csv.Error as err:
                raise InvalidRowError(
                    f"Line {self._reader.line_num}: unreadable record: {err}"
                ) from err
            # Blank lines come through as empty records
            if record:
                break

        line_number = self._reader.line_num
        row = {
            name: record[index] if index < len(record) else ""
            for name, index in self._wanted.items()
        }
        if any(REPLACEMENT_CHARACTER in value for value in row.values()):
            raise InvalidRowError(f"Line {line_number}: record is not valid UTF-8")
        return line_number, row


def iter_rows(stream: TextIO) -> RowReader:
    """
    Read the header and return an iterator over the following rows.

    Raises:
        InvalidInputError: If the header is missing or lacks a required column
    """
    return RowReader(stream)


def parse_row(row: dict[str, str]) -> Transaction:
    """
    Convert a raw row into a Transaction.

    Args:
        row: Mapping of column name to raw value, as produced by iter_rows

    Returns:
        The parsed Transaction

    Raises:
        InvalidRowError: If any field cannot be converted or is out of range
    """
    fields = {name: (value or "").strip() for name, value in row.items()}

    try:
        txn_type = TransactionType(fields.get("type", "").lower())
    except ValueError as err:
        raise InvalidRowError(
            f"Value '{fields.get('type', '')}' is not a valid transaction type"
        ) from err

    client_id = _parse_id(fields.get("client", ""), "client", MAX_CLIENT_ID)
    txn_id = _parse_id(fields.get("tx", ""), "tx", MAX_TRANSACTION_ID)
    amount = None
    # Disputes, resolves and chargebacks take their amount from the referenced transaction
    if txn_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
        amount = _parse_amount(fields.get("amount", ""))

    return Transaction(
        type=txn_type,
        client_id=client_id,
        transaction_id=txn_id,
        amount=amount,
    )


def _parse_id(text: str, name: str, maximum: int) -> int:
    try:
        value = int(text)
    except ValueError as err:
        raise InvalidRowError(f"Value '{text}' for {name} is not an integer") from err
    if not 0 <= value <= maximum:
        raise InvalidRowError(f"Value {value} for {name} is out of range 0..{maximum}")
    return value


def _parse_amount(text: str) -> Decimal | None:
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation as err:
        raise InvalidRowError(f"Value '{text}' cannot be converted to decimal") from err
    if not amount.is_finite():
        raise InvalidRowError(f"Value '{text}' is not a finite amount")
    if amount < 0:
        raise InvalidRowError(f"Cannot use negative amount: {text}")
    try:
        quantize(amount)
    except AmountOverflowError as err:
        raise InvalidRowError(f"Value '{text}' is out of range: {err}") from err
    return amount
