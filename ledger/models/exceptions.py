"""Custom exceptions for the payment ledger."""


class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InvalidInputError(LedgerError):
    """Raised when the input cannot be read as a ledger at all (e.g., missing header columns)."""
    pass


class InvalidRowError(LedgerError):
    """Raised when a single input row cannot be parsed into a transaction."""
    pass


class StorageError(LedgerError):
    """Raised when the backing store fails to read, write or deserialize a record."""
    pass


class TransactionRejectedError(LedgerError):
    """Base exception for business-rule violations; the row is skipped."""
    pass


class MissingAmountError(TransactionRejectedError):
    """Raised when a transaction which requires an amount has none."""
    pass


class InsufficientFundsError(TransactionRejectedError):
    """Raised when a withdrawal exceeds the available funds of the account."""
    pass


class TransactionNotFoundError(TransactionRejectedError):
    """Raised when a referenced transaction does not exist."""
    pass


class AlreadyDisputedError(TransactionRejectedError):
    """Raised when disputing a transaction that is already disputed."""
    pass


class NotDisputedError(TransactionRejectedError):
    """Raised when resolving or charging back a transaction that is not disputed."""
    pass


class InvalidReferencedTypeError(TransactionRejectedError):
    """Raised when a dispute, resolve or chargeback references anything but a deposit or withdrawal."""
    pass


class DuplicateTransactionError(TransactionRejectedError):
    """Raised when a deposit or withdrawal reuses an existing transaction id."""
    pass


class ClientMismatchError(TransactionRejectedError):
    """Raised when a client references a transaction owned by another client."""
    pass


class AmountOverflowError(TransactionRejectedError):
    """Raised when an amount or balance no longer fits the ledger precision."""
    pass
