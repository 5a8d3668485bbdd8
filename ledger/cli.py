"""Command line entry point: replay a CSV transaction log and print balances."""

import argparse
import csv
import logging
import sqlite3
import sys

from dotenv import load_dotenv

from config.settings import Settings
from ledger import __version__
from ledger.formats.account_report import write_report
from ledger.models.exceptions import InvalidInputError, StorageError
from ledger.repositories.account_repo import AccountRepository
from ledger.repositories.transaction_repo import TransactionRepository
from ledger.services.ledger_runner import LedgerRunner
from ledger.services.transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s:%(levelname)s:%(name)s: %(message)s'


def configure_logging(settings: Settings) -> None:
    """Send the ledger's log records to the configured file, or stderr."""
    ledger_logger = logging.getLogger('ledger')
    ledger_logger.setLevel(settings.log_level)
    for handler in list(ledger_logger.handlers):
        ledger_logger.removeHandler(handler)
        handler.close()

    if settings.log_file:
        handler = logging.FileHandler(filename=settings.log_file, encoding='utf-8', mode='w')
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    ledger_logger.addHandler(handler)


def build_runner(settings: Settings) -> tuple[LedgerRunner, sqlite3.Connection]:
    """
    Wire the stores, the processor and the runner together.

    Returns:
        The runner and the SQLite connection backing its transaction store;
        the caller closes the connection when the run is over

    Raises:
        StorageError: If the transaction store cannot be initialized
    """
    try:
        conn = sqlite3.connect(settings.transaction_db_path)
    except sqlite3.Error as err:
        raise StorageError(f"Cannot open transaction database {settings.transaction_db_path}: {err}") from err

    transaction_repo = TransactionRepository(conn, cache_size=settings.dispute_cache_size)
    try:
        transaction_repo.reset()
    except StorageError:
        conn.close()
        raise

    account_repo = AccountRepository()
    processor = TransactionProcessor(account_repo, transaction_repo)
    return LedgerRunner(processor, account_repo), conn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='payments',
        description='Replay a CSV log of deposits, withdrawals and disputes and print the final account balances.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('input', help='Path for the CSV input file')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    try:
        settings = Settings.load()
    except ValueError as err:
        configure_logging(Settings())
        logger.error(f"Fatal invalid configuration: {err}")
        return 1
    configure_logging(settings)

    try:
        runner, conn = build_runner(settings)
    except StorageError as err:
        logger.error(f"Fatal {err}")
        return 1

    try:
        # Undecodable bytes become U+FFFD and their row is rejected by the reader
        with open(args.input, newline='', encoding='utf-8', errors='replace') as stream:
            runner.run(stream)
    except (OSError, csv.Error) as err:
        logger.error(f"Fatal error importing CSV file {args.input}, check file path: {err}")
        return 1
    except InvalidInputError as err:
        logger.error(f"Fatal {err}")
        return 1
    finally:
        conn.close()

    write_report(runner.accounts(), sys.stdout, settings.output_format)
    return 0


if __name__ == '__main__':
    sys.exit(main())
