"""Account data model."""

from dataclasses import dataclass
from decimal import Decimal

from .transaction import quantize


@dataclass
class Account:
    """Represents the balances of a single client."""

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False

    def round_values(self) -> None:
        """
        Round every balance to the ledger precision.

        Raises:
            AmountOverflowError: If a balance no longer fits the ledger precision
        """
        self.available = quantize(self.available)
        self.held = quantize(self.held)
        self.total = quantize(self.total)
