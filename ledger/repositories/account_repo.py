"""Account repository."""

import threading
from dataclasses import replace

from ledger.models.account import Account
from ledger.repositories.base import AccountStore


class AccountRepository(AccountStore):
    """
    Repository for Account data access operations.

    Holds one entry per distinct client, so a plain mapping is enough. Every
    read hands out a copy: a caller that abandons a half-applied mutation
    leaves the stored account untouched.
    """

    def __init__(self):
        self._accounts: dict[int, Account] = {}
        self._lock = threading.Lock()

    def find_by_client_id(self, client_id: int) -> Account | None:
        """
        Find an account by client ID.

        Args:
            client_id: The client ID to search for

        Returns:
            A copy of the Account if found, None otherwise
        """
        with self._lock:
            account = self._accounts.get(client_id)
            return None if account is None else replace(account)

    def get_or_create(self, client_id: int) -> Account:
        """
        Get an existing account or create a zeroed one.

        The new account is stored immediately, so a client shows up in the
        final report even if none of its transactions succeed.

        Args:
            client_id: The client ID

        Returns:
            A copy of the existing or newly created Account
        """
        with self._lock:
            account = self._accounts.get(client_id)
            if account is None:
                account = Account(client_id=client_id)
                self._accounts[client_id] = account
            return replace(account)

    def save(self, account: Account) -> None:
        """
        Save an account, replacing the stored state for its client.

        Args:
            account: The Account object to save
        """
        with self._lock:
            self._accounts[account.client_id] = replace(account)

    def list_all(self) -> list[Account]:
        """
        List every account.

        Returns:
            Copies of all accounts ordered by client ID
        """
        with self._lock:
            return [replace(self._accounts[client_id]) for client_id in sorted(self._accounts)]
