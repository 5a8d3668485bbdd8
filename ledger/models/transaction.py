"""Transaction data model."""

from dataclasses import dataclass
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)
from enum import Enum

from .exceptions import AmountOverflowError

DECIMAL_PLACES = 4
_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)

# Significant digits kept for amounts and balances
PRECISION = 38
MAX_INTEGER_DIGITS = PRECISION - DECIMAL_PLACES

LEDGER_CONTEXT = Context(
    prec=PRECISION,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


def ledger_context():
    """Return a context manager running decimal arithmetic at the ledger precision."""
    return localcontext(LEDGER_CONTEXT)


def quantize(value: Decimal) -> Decimal:
    """
    Round a decimal to the ledger precision of four fractional digits.

    Raises:
        AmountOverflowError: If the value has more than MAX_INTEGER_DIGITS
            integer digits
    """
    with ledger_context():
        try:
            return value.quantize(_QUANTUM)
        except InvalidOperation as err:
            raise AmountOverflowError(
                f"Amount {value} does not fit in {MAX_INTEGER_DIGITS} integer digits"
            ) from err


def normalize_amount(amount: Decimal | None) -> Decimal | None:
    """
    Normalize a transaction amount.

    Args:
        amount: The raw amount, or None

    Returns:
        The amount rounded to four fractional digits, or None when it was
        absent or rounds to exactly zero
    """
    if amount is None:
        return None
    amount = quantize(amount)
    if amount.is_zero():
        return None
    return amount


@dataclass
class Transaction:
    """
    Represents one row of the ledger.

    Deposits and withdrawals own their transaction_id. Disputes, resolves and
    chargebacks carry the id of the deposit or withdrawal they reference and
    never have an amount or disputed state of their own.
    """

    type: TransactionType
    client_id: int
    transaction_id: int
    amount: Decimal | None = None
    disputed: bool = False

    def __post_init__(self):
        self.amount = normalize_amount(self.amount)
