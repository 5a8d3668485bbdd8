"""In-memory transaction repository."""

from dataclasses import replace

from ledger.models.exceptions import DuplicateTransactionError, TransactionNotFoundError
from ledger.models.transaction import Transaction
from ledger.repositories.base import TransactionStore


class InMemoryTransactionRepository(TransactionStore):
    """
    Dict-backed transaction store without a cache.

    Substitutes for TransactionRepository wherever a SQLite connection is
    unnecessary, e.g. when exercising the processor in isolation.
    """

    def __init__(self, transactions: list[Transaction] | None = None):
        self._transactions: dict[int, Transaction] = {}
        for txn in transactions or []:
            self.create(txn)

    def find_by_id(self, txn_id: int) -> Transaction | None:
        txn = self._transactions.get(txn_id)
        return None if txn is None else replace(txn)

    def create(self, txn: Transaction) -> None:
        if txn.transaction_id in self._transactions:
            raise DuplicateTransactionError(f"Transaction {txn.transaction_id} already exists")
        self._transactions[txn.transaction_id] = replace(txn)

    def set_disputed(self, txn_id: int, disputed: bool) -> None:
        txn = self._transactions.get(txn_id)
        if txn is None:
            raise TransactionNotFoundError(
                f"Transaction {txn_id} not found, cannot change disputed status"
            )
        txn.disputed = disputed

    def evict_from_cache(self, txn_id: int) -> None:
        pass

    def __len__(self) -> int:
        return len(self._transactions)
