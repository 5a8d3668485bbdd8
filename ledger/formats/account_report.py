"""Rendering of the final account balances."""

import csv
from decimal import Decimal
from typing import Iterable, TextIO

from tabulate import tabulate

from ledger.models.account import Account
from ledger.models.transaction import quantize

HEADER = ["client", "available", "held", "total", "locked"]
OUTPUT_FORMATS = ("csv", "table")


def format_decimal(value: Decimal) -> str:
    """Format a balance with at most four decimal places and no trailing zeros."""
    normalized = quantize(value).normalize()
    return f"{normalized:f}"


def account_rows(accounts: Iterable[Account]) -> list[list[str]]:
    """Convert accounts to report rows ordered by client ID."""
    return [
        [
            str(account.client_id),
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ]
        for account in sorted(accounts, key=lambda account: account.client_id)
    ]


def write_csv(accounts: Iterable[Account], stream: TextIO) -> None:
    """
    Write accounts as CSV with a header row.

    Args:
        accounts: The accounts to report
        stream: Destination text stream
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    writer.writerows(account_rows(accounts))


def render_table(accounts: Iterable[Account]) -> str:
    """Render accounts as a right-aligned plain-text table."""
    return tabulate(
        [HEADER] + account_rows(accounts),
        headers="firstrow",
        stralign="right",
        disable_numparse=True,
    )


def write_report(accounts: Iterable[Account], stream: TextIO, output_format: str = "csv") -> None:
    """
    Write accounts in the requested format.

    Args:
        accounts: The accounts to report
        stream: Destination text stream
        output_format: Either 'csv' or 'table'

    Raises:
        ValueError: If the output format is unknown
    """
    if output_format == "csv":
        write_csv(accounts, stream)
    elif output_format == "table":
        stream.write(render_table(accounts) + "\n")
    else:
        raise ValueError(f"Unknown output format '{output_format}', expected one of {OUTPUT_FORMATS}")
