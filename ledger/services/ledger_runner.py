"""Run loop feeding the transaction log to the processor."""

import logging
from dataclasses import dataclass
from typing import TextIO

from ledger.formats.transaction_csv import iter_rows, parse_row
from ledger.models.account import Account
from ledger.models.exceptions import InvalidRowError, StorageError, TransactionRejectedError
from ledger.repositories.base import AccountStore
from ledger.services.transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Counters collected over one run."""

    processed: int = 0
    rejected: int = 0
    malformed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.rejected + self.malformed + self.failed


class LedgerRunner:
    """
    Replays a transaction log in file order.

    Row-level problems are logged and counted, never raised: a malformed
    row, a rejected transaction or a storage failure on one row does not
    stop the rest of the log from being applied.
    """

    def __init__(self, processor: TransactionProcessor, account_repo: AccountStore):
        """
        Initialize the runner.

        Args:
            processor: Processor applying each transaction
            account_repo: Store the final accounts are read from
        """
        self._processor = processor
        self._account_repo = account_repo

    def run(self, stream: TextIO) -> RunSummary:
        """
        Apply every row of a CSV transaction log.

        Args:
            stream: Open text stream of the log, header row first

        Returns:
            Counters for the run

        Raises:
            InvalidInputError: If the header cannot be read
        """
        summary = RunSummary()
        logger.info("Starting transaction processing")

        rows = iter_rows(stream)
        while True:
            try:
                line_number, row = next(rows)
            except StopIteration:
                break
            except InvalidRowError as err:
                summary.malformed += 1
                logger.warning(f"{err}, row skipped")
                continue

            try:
                txn = parse_row(row)
            except InvalidRowError as err:
                summary.malformed += 1
                logger.warning(f"Line {line_number}: invalid data, row skipped: {err} | {row}")
                continue

            try:
                self._processor.process(txn)
            except TransactionRejectedError as err:
                summary.rejected += 1
                account = self._account_repo.find_by_client_id(txn.client_id)
                logger.warning(f"Line {line_number}: {err} | {account} {txn}")
                continue
            except StorageError as err:
                summary.failed += 1
                logger.error(f"Line {line_number}: storage failure, row skipped: {err} | {txn}")
                continue

            summary.processed += 1

        logger.info(
            f"Processed all transactions: {summary.processed} applied, {summary.rejected} rejected, "
            f"{summary.malformed} malformed, {summary.failed} failed"
        )
        return summary

    def accounts(self) -> list[Account]:
        """Return the final state of every known account."""
        return self._account_repo.list_all()
