"""Transaction repository backed by SQLite with an LRU dispute cache."""

import logging
import sqlite3
import threading
from decimal import Decimal, InvalidOperation

from ledger.models.exceptions import (
    AmountOverflowError,
    DuplicateTransactionError,
    StorageError,
    TransactionNotFoundError,
)
from ledger.models.transaction import Transaction, TransactionType
from ledger.repositories.base import TransactionStore
from ledger.repositories.dispute_cache import DEFAULT_CAPACITY, DisputeCache

logger = logging.getLogger(__name__)


class TransactionRepository(TransactionStore):
    """Repository for Transaction data access operations."""

    def __init__(self, conn: sqlite3.Connection, cache_size: int = DEFAULT_CAPACITY):
        """
        Initialize the repository with a database connection.

        Args:
            conn: SQLite database connection
            cache_size: Capacity of the disputed transaction cache
        """
        self._conn = conn
        self._conn.row_factory = sqlite3.Row
        self._cache = DisputeCache(cache_size)
        # Reentrant: set_disputed looks the transaction up while holding it
        self._lock = threading.RLock()

    def create_table(self) -> None:
        """Create the Transactions table if it doesn't exist."""
        try:
            cursor = self._conn.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS Transactions (
                    TransactionID INTEGER PRIMARY KEY,
                    Type TEXT NOT NULL,
                    ClientID INTEGER NOT NULL,
                    Amount TEXT,
                    Disputed INTEGER NOT NULL DEFAULT 0
                )
            """
            )
            self._conn.commit()
        except sqlite3.Error as err:
            raise StorageError(f"Cannot create Transactions table: {err}") from err

    def reset(self) -> None:
        """
        Drop every stored transaction and recreate an empty table.

        The ledger keeps no state across runs, so a database file left over
        from a previous run is wiped before a new one starts.
        """
        try:
            self._conn.execute("DROP TABLE IF EXISTS Transactions")
            self._conn.commit()
        except sqlite3.Error as err:
            raise StorageError(f"Cannot reset Transactions table: {err}") from err
        with self._lock:
            self._cache = DisputeCache(self._cache.capacity)
        self.create_table()

    def find_by_id(self, txn_id: int) -> Transaction | None:
        """
        Find a transaction by ID.

        The dispute cache is consulted first; a miss falls through to SQLite.

        Args:
            txn_id: The transaction ID to search for

        Returns:
            Transaction object if found, None otherwise

        Raises:
            StorageError: If the row cannot be read or deserialized
        """
        with self._lock:
            cached = self._cache.get(txn_id)
            if cached is not None:
                return cached
            return self._load(txn_id)

    def create(self, txn: Transaction) -> None:
        """
        Create a new transaction.

        Args:
            txn: The deposit or withdrawal to store

        Raises:
            DuplicateTransactionError: If a transaction with the same ID already exists
            StorageError: If the row cannot be written
        """
        with self._lock:
            try:
                self._conn.execute(
                    """
                    INSERT INTO Transactions (TransactionID, Type, ClientID, Amount, Disputed)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (
                        txn.transaction_id,
                        txn.type.value,
                        txn.client_id,
                        None if txn.amount is None else str(txn.amount),
                        int(txn.disputed),
                    ),
                )
                self._conn.commit()
            except sqlite3.IntegrityError:
                raise DuplicateTransactionError(
                    f"Transaction {txn.transaction_id} already exists"
                )
            except sqlite3.Error as err:
                raise StorageError(
                    f"Cannot save transaction {txn.transaction_id}: {err}"
                ) from err

    def set_disputed(self, txn_id: int, disputed: bool) -> None:
        """
        Update the disputed flag of a transaction.

        SQLite is written first. A transaction entering dispute is put in the
        cache; a cached copy of a transaction leaving dispute is refreshed so
        the cache never disagrees with SQLite.

        Args:
            txn_id: The transaction ID to update
            disputed: The new disputed value

        Raises:
            TransactionNotFoundError: If the transaction doesn't exist
            StorageError: If the row cannot be written
        """
        with self._lock:
            txn = self.find_by_id(txn_id)
            if txn is None:
                raise TransactionNotFoundError(
                    f"Transaction {txn_id} not found, cannot change disputed status"
                )

            try:
                self._conn.execute(
                    "UPDATE Transactions SET Disputed = ? WHERE TransactionID = ?",
                    (int(disputed), txn_id),
                )
                self._conn.commit()
            except sqlite3.Error as err:
                raise StorageError(
                    f"Cannot update disputed status of transaction {txn_id}: {err}"
                ) from err

            txn.disputed = disputed
            if disputed or txn_id in self._cache:
                self._cache.put(txn)
            logger.debug(f"Transaction {txn_id} disputed={disputed}, {len(self._cache)} cached")

    def evict_from_cache(self, txn_id: int) -> None:
        """
        Remove a transaction from the dispute cache.

        Args:
            txn_id: The transaction ID to evict
        """
        with self._lock:
            self._cache.remove(txn_id)

    def count(self) -> int:
        """Return the number of stored transactions."""
        try:
            row = self._conn.execute("SELECT COUNT(*) FROM Transactions").fetchone()
        except sqlite3.Error as err:
            raise StorageError(f"Cannot count transactions: {err}") from err
        return row[0]

    def _load(self, txn_id: int) -> Transaction | None:
        try:
            cursor = self._conn.cursor()
            cursor.execute(
                """SELECT TransactionID, Type, ClientID, Amount, Disputed
                   FROM Transactions WHERE TransactionID = ?""",
                (txn_id,),
            )
            row = cursor.fetchone()
        except sqlite3.Error as err:
            raise StorageError(f"Cannot read transaction {txn_id}: {err}") from err

        if row is None:
            return None

        try:
            return Transaction(
                type=TransactionType(row["Type"]),
                client_id=row["ClientID"],
                transaction_id=row["TransactionID"],
                amount=None if row["Amount"] is None else Decimal(row["Amount"]),
                disputed=bool(row["Disputed"]),
            )
        except (ValueError, InvalidOperation, AmountOverflowError) as err:
            raise StorageError(f"Cannot deserialize transaction {txn_id}: {err}") from err
