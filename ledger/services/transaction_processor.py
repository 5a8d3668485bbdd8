"""Transaction processor: the state machine applying ledger rows to accounts."""

import logging
from decimal import Decimal

from ledger.models.account import Account
from ledger.models.exceptions import (
    AlreadyDisputedError,
    ClientMismatchError,
    DuplicateTransactionError,
    InsufficientFundsError,
    InvalidReferencedTypeError,
    MissingAmountError,
    NotDisputedError,
    TransactionNotFoundError,
)
from ledger.models.transaction import Transaction, TransactionType, ledger_context
from ledger.repositories.base import AccountStore, TransactionStore

logger = logging.getLogger(__name__)

DISPUTABLE_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class TransactionProcessor:
    """
    Applies one transaction at a time to the account of its client.

    A referenced deposit or withdrawal moves through the states
    undisputed -> disputed -> undisputed (resolve) or
    undisputed -> disputed -> charged back (chargeback, account locked).

    Every handler validates first and writes last. Balances are rounded, and
    checked against the ledger precision, before the first write. The account
    is read as a copy, so a rejected transaction leaves both stores untouched.
    """

    def __init__(self, account_repo: AccountStore, transaction_repo: TransactionStore):
        """
        Initialize the processor with its stores.

        Args:
            account_repo: Store for client accounts
            transaction_repo: Store for deposits and withdrawals
        """
        self._account_repo = account_repo
        self._transaction_repo = transaction_repo
        self._handlers = {
            TransactionType.DEPOSIT: self._handle_deposit,
            TransactionType.WITHDRAWAL: self._handle_withdrawal,
            TransactionType.DISPUTE: self._handle_dispute,
            TransactionType.RESOLVE: self._handle_resolve,
            TransactionType.CHARGEBACK: self._handle_chargeback,
        }

    def process(self, txn: Transaction) -> Account:
        """
        Apply a single transaction.

        Args:
            txn: The parsed transaction

        Returns:
            The updated Account as persisted

        Raises:
            TransactionRejectedError: If a business rule rejects the transaction,
                including a balance outgrowing the ledger precision
            StorageError: If a store fails to read or write
        """
        # Accounts exist from their first reference on, even if this row fails
        account = self._account_repo.get_or_create(txn.client_id)
        with ledger_context():
            self._handlers[txn.type](txn, account)
        self._account_repo.save(account)
        return account

    def _handle_deposit(self, txn: Transaction, account: Account) -> None:
        amount = self._require_amount(txn)
        self._require_new(txn)

        account.available += amount
        account.total += amount
        account.round_values()

        self._transaction_repo.create(txn)

    def _handle_withdrawal(self, txn: Transaction, account: Account) -> None:
        amount = self._require_amount(txn)
        self._require_new(txn)

        # Held funds are never withdrawable
        if amount > account.available:
            raise InsufficientFundsError(
                f"Insufficient funds: {account.available} available, {amount} requested"
            )

        account.available -= amount
        account.total -= amount
        account.round_values()

        self._transaction_repo.create(txn)

    def _handle_dispute(self, txn: Transaction, account: Account) -> None:
        referenced = self._find_referenced(txn)

        if referenced.disputed:
            raise AlreadyDisputedError(f"Transaction {referenced.transaction_id} is already disputed")

        amount = self._require_amount(referenced)

        if referenced.type == TransactionType.DEPOSIT:
            account.available -= amount
            account.held += amount
        else:
            # A withdrawal has already left available, so the disputed
            # amount comes back as held funds
            account.held += amount
            account.total += amount
        account.round_values()

        self._transaction_repo.set_disputed(referenced.transaction_id, True)

    def _handle_resolve(self, txn: Transaction, account: Account) -> None:
        referenced = self._find_disputed(txn)
        amount = self._require_amount(referenced)

        account.available += amount
        account.held -= amount
        account.round_values()

        self._close_dispute(referenced)

    def _handle_chargeback(self, txn: Transaction, account: Account) -> None:
        referenced = self._find_disputed(txn)
        amount = self._require_amount(referenced)

        account.held -= amount
        account.total -= amount
        account.locked = True
        account.round_values()

        self._close_dispute(referenced)
        logger.info(f"Client {account.client_id} locked by chargeback of transaction {referenced.transaction_id}")

    def _require_amount(self, txn: Transaction) -> Decimal:
        if txn.amount is None:
            raise MissingAmountError(
                f"Transaction {txn.transaction_id} ({txn.type.value}) has no amount"
            )
        return txn.amount

    def _require_new(self, txn: Transaction) -> None:
        if self._transaction_repo.find_by_id(txn.transaction_id) is not None:
            raise DuplicateTransactionError(f"Transaction {txn.transaction_id} already exists")

    def _find_referenced(self, txn: Transaction) -> Transaction:
        """
        Look up the deposit or withdrawal a dispute-family transaction points at.

        Raises:
            TransactionNotFoundError: If no transaction has the referenced id
            ClientMismatchError: If the referenced transaction belongs to another client
            InvalidReferencedTypeError: If the reference is not a deposit or withdrawal
        """
        referenced = self._transaction_repo.find_by_id(txn.transaction_id)
        if referenced is None:
            raise TransactionNotFoundError(
                f"Referenced transaction {txn.transaction_id} does not exist"
            )
        if referenced.client_id != txn.client_id:
            raise ClientMismatchError(
                f"Transaction {txn.transaction_id} belongs to client {referenced.client_id}, "
                f"not {txn.client_id}"
            )
        if referenced.type not in DISPUTABLE_TYPES:
            raise InvalidReferencedTypeError(
                f"Transaction {txn.transaction_id} is a {referenced.type.value}, "
                "only deposits and withdrawals can be disputed"
            )
        return referenced

    def _find_disputed(self, txn: Transaction) -> Transaction:
        referenced = self._find_referenced(txn)
        if not referenced.disputed:
            raise NotDisputedError(f"Transaction {referenced.transaction_id} is not disputed")
        return referenced

    def _close_dispute(self, referenced: Transaction) -> None:
        self._transaction_repo.set_disputed(referenced.transaction_id, False)
        self._transaction_repo.evict_from_cache(referenced.transaction_id)
