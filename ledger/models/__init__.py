"""Data models for the payment ledger."""

from .account import Account
from .transaction import Transaction, TransactionType, ledger_context, normalize_amount
from .exceptions import (
    LedgerError,
    InvalidInputError,
    InvalidRowError,
    StorageError,
    TransactionRejectedError,
    MissingAmountError,
    InsufficientFundsError,
    TransactionNotFoundError,
    AlreadyDisputedError,
    NotDisputedError,
    InvalidReferencedTypeError,
    DuplicateTransactionError,
    ClientMismatchError,
    AmountOverflowError,
)

__all__ = [
    "Account",
    "Transaction",
    "TransactionType",
    "normalize_amount",
    "ledger_context",
    "LedgerError",
    "InvalidInputError",
    "InvalidRowError",
    "StorageError",
    "TransactionRejectedError",
    "MissingAmountError",
    "InsufficientFundsError",
    "TransactionNotFoundError",
    "AlreadyDisputedError",
    "NotDisputedError",
    "InvalidReferencedTypeError",
    "DuplicateTransactionError",
    "ClientMismatchError",
    "AmountOverflowError",
]
