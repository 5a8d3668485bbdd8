"""Storage interfaces the transaction processor depends on."""

from abc import ABC, abstractmethod

from ledger.models.account import Account
from ledger.models.transaction import Transaction


class TransactionStore(ABC):
    """Stores deposits and withdrawals by transaction id."""

    @abstractmethod
    def find_by_id(self, txn_id: int) -> Transaction | None:
        """Return the stored transaction, or None if the id is unknown."""

    @abstractmethod
    def create(self, txn: Transaction) -> None:
        """Store a new deposit or withdrawal."""

    @abstractmethod
    def set_disputed(self, txn_id: int, disputed: bool) -> None:
        """
        Change the disputed flag of a stored transaction.

        Raises:
            TransactionNotFoundError: If no transaction has this id
        """

    @abstractmethod
    def evict_from_cache(self, txn_id: int) -> None:
        """Drop any cached copy of the transaction. Never affects find_by_id results."""


class AccountStore(ABC):
    """Stores one account per client id."""

    @abstractmethod
    def find_by_client_id(self, client_id: int) -> Account | None:
        """Return a copy of the account, or None if the client is unknown."""

    @abstractmethod
    def get_or_create(self, client_id: int) -> Account:
        """Return a copy of the account, persisting a zeroed one first if needed."""

    @abstractmethod
    def save(self, account: Account) -> None:
        """Persist the account, replacing any previous state for its client."""

    @abstractmethod
    def list_all(self) -> list[Account]:
        """Return every known account ordered by client id."""
