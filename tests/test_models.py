"""Tests for data models and exceptions."""

from decimal import Decimal

import pytest

from ledger.models import (
    Account,
    AlreadyDisputedError,
    AmountOverflowError,
    ClientMismatchError,
    DuplicateTransactionError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidReferencedTypeError,
    InvalidRowError,
    LedgerError,
    MissingAmountError,
    NotDisputedError,
    StorageError,
    Transaction,
    TransactionNotFoundError,
    TransactionRejectedError,
    TransactionType,
    normalize_amount,
)


def test_account_defaults():
    """A new account starts zeroed and unlocked."""
    account = Account(client_id=7)

    assert account.client_id == 7
    assert account.available == Decimal("0")
    assert account.held == Decimal("0")
    assert account.total == Decimal("0")
    assert account.locked is False


def test_account_round_values():
    """Balances are rounded half-even to four places."""
    account = Account(
        client_id=1,
        available=Decimal("1.23456"),
        held=Decimal("0.00005"),
        total=Decimal("1.23461"),
    )

    account.round_values()

    assert account.available == Decimal("1.2346")
    assert account.held == Decimal("0.0000")
    assert account.total == Decimal("1.2346")
    assert str(account.available) == "1.2346"


def test_transaction_defaults():
    """A dispute carries no amount and starts undisputed."""
    txn = Transaction(type=TransactionType.DISPUTE, client_id=1, transaction_id=3)

    assert txn.amount is None
    assert txn.disputed is False


def test_transaction_amount_normalized():
    """Amounts are rounded to four places on construction."""
    txn = Transaction(
        type=TransactionType.DEPOSIT,
        client_id=1,
        transaction_id=1,
        amount=Decimal("2.718281828"),
    )

    assert txn.amount == Decimal("2.7183")


def test_transaction_zero_amount_is_absent():
    """An amount rounding to zero is treated as no amount."""
    txn = Transaction(
        type=TransactionType.DEPOSIT,
        client_id=1,
        transaction_id=1,
        amount=Decimal("0.00004"),
    )

    assert txn.amount is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        (Decimal("0"), None),
        (Decimal("0.0000"), None),
        (Decimal("10"), Decimal("10.0000")),
        (Decimal("0.00015"), Decimal("0.0002")),
        (Decimal("0.00025"), Decimal("0.0002")),
    ],
)
def test_normalize_amount(raw, expected):
    assert normalize_amount(raw) == expected


def test_normalize_amount_wide_values():
    """Amounts far beyond the default decimal precision are still exact."""
    raw = Decimal("1" + "0" * 33 + ".00005")

    assert normalize_amount(raw) == Decimal("1" + "0" * 33 + ".0000")


def test_normalize_amount_overflow():
    with pytest.raises(AmountOverflowError, match="34 integer digits"):
        normalize_amount(Decimal("1e34"))


def test_account_round_values_overflow():
    """A balance that outgrows the ledger precision is reported, not truncated."""
    account = Account(client_id=1, available=Decimal("9" * 35))

    with pytest.raises(AmountOverflowError):
        account.round_values()


def test_transaction_type_values():
    assert [t.value for t in TransactionType] == [
        "deposit",
        "withdrawal",
        "dispute",
        "resolve",
        "chargeback",
    ]


def test_exception_hierarchy():
    """Every exception derives from LedgerError; business rules share a base."""
    for exc in (InvalidInputError, InvalidRowError, StorageError, TransactionRejectedError):
        assert issubclass(exc, LedgerError)

    for exc in (
        MissingAmountError,
        InsufficientFundsError,
        TransactionNotFoundError,
        AlreadyDisputedError,
        NotDisputedError,
        InvalidReferencedTypeError,
        DuplicateTransactionError,
        ClientMismatchError,
        AmountOverflowError,
    ):
        assert issubclass(exc, TransactionRejectedError)

    assert not issubclass(StorageError, TransactionRejectedError)
    assert not issubclass(InvalidRowError, TransactionRejectedError)


def test_exception_message():
    """Exceptions can be raised and caught through the base class."""
    with pytest.raises(LedgerError) as exc_info:
        raise NotDisputedError("Transaction 5 is not disputed")

    assert str(exc_info.value) == "Transaction 5 is not disputed"
